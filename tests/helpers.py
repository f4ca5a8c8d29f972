"""Builders shared by the test modules."""

from roulette_analytics.core import BallState, WheelState, Point2D, Sample, BallDetection, WheelDetection


class FakeClock:
    """Manually advanced millisecond clock."""

    def __init__(self, now: int = 0):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int):
        self.now += ms


def make_ball(velocity=50.0, confidence=0.9, x=0.0, y=0.0, timestamp=0):
    return BallState(position=Point2D(x, y), velocity=velocity, confidence=confidence, timestamp=timestamp)


def make_wheel(rotation_speed=10.0, angle=0.0, confidence=1.0, timestamp=0):
    return WheelState(angle=angle, rotation_speed=rotation_speed, confidence=confidence, timestamp=timestamp)


def make_sample(timestamp, ball_x=None, wheel_angle=None, ball_y=0.0):
    """Sample with optional ball (at (ball_x, ball_y)) and wheel detections."""
    ball = None
    wheel = None
    if ball_x is not None:
        ball = BallDetection(Point2D(ball_x, ball_y), timestamp)
    if wheel_angle is not None:
        wheel = WheelDetection(wheel_angle, timestamp)
    return Sample(timestamp=timestamp, ball=ball, wheel=wheel)


def moving_samples(count, start=0, step_ms=600, ball_speed=50.0, wheel_speed=10.0):
    """Ball moving along x and wheel turning at constant rates."""
    samples = []
    for i in range(count):
        t = start + i * step_ms
        seconds = (t - start) / 1000.0
        samples.append(make_sample(t, ball_x=ball_speed * seconds, wheel_angle=(wheel_speed * seconds) % 360))
    return samples
