import numpy as np
import pytest
from swerve_control.errors import ConfigurationError
from swerve_control.profile import MotionConstraints, TrapezoidProfile, sample_profile

# -----------------------------------------------------------------------------
# Tests for MotionConstraints
# -----------------------------------------------------------------------------

@pytest.mark.parametrize("v_max, a_max", [(0.0, 2.0), (3.0, 0.0), (-1.0, 2.0), (float("nan"), 2.0)])
def test_constraints_reject_degenerate_values(v_max, a_max):
    """Zero or negative limits cannot produce a moving profile."""
    with pytest.raises(ConfigurationError):
        MotionConstraints(v_max, a_max)


def test_profile_rejects_negative_goal():
    with pytest.raises(ConfigurationError, match="non-negative"):
        TrapezoidProfile(MotionConstraints(3.0, 2.0), -1.0)

# -----------------------------------------------------------------------------
# Tests for TrapezoidProfile
# -----------------------------------------------------------------------------

def test_trapezoid_phase_times():
    """Goal 10m, v=3, a=2: ramp 1.5s covers 2.25m each way, cruise covers 5.5m."""
    profile = TrapezoidProfile(MotionConstraints(3.0, 2.0), 10.0)

    assert profile.accel_time == pytest.approx(1.5)
    assert profile.cruise_time == pytest.approx(5.5 / 3.0)
    assert profile.total_time() == pytest.approx(3.0 + 5.5 / 3.0)
    assert profile.peak_velocity == pytest.approx(3.0)


def test_triangle_when_goal_is_short():
    """Goal 1m cannot reach 3 m/s at 2 m/s^2, so the profile peaks early."""
    profile = TrapezoidProfile(MotionConstraints(3.0, 2.0), 1.0)

    assert profile.cruise_time == 0.0
    assert profile.accel_time == pytest.approx(np.sqrt(0.5))
    assert profile.peak_velocity == pytest.approx(2.0 * np.sqrt(0.5))
    assert profile.peak_velocity < 3.0


def test_start_and_end_states():
    profile = TrapezoidProfile(MotionConstraints(3.0, 2.0), 4.2426)

    start = profile.calculate(0.0)
    assert start.position == 0.0
    assert start.velocity == 0.0

    end = profile.calculate(profile.total_time() + 1.0)
    assert end.position == pytest.approx(4.2426)
    assert end.velocity == 0.0
    assert profile.is_finished(profile.total_time())


def test_negative_time_is_start():
    profile = TrapezoidProfile(MotionConstraints(3.0, 2.0), 2.0)
    assert profile.calculate(-0.5) == profile.calculate(0.0)


def test_profile_is_pure_function_of_time():
    """Evaluating out of order or repeatedly must not change the result."""
    profile = TrapezoidProfile(MotionConstraints(3.0, 2.0), 10.0)

    first = profile.calculate(2.0)
    profile.calculate(5.0)
    profile.calculate(0.1)
    again = profile.calculate(2.0)

    assert first == again


def test_profile_is_symmetric():
    """Halfway through the time, the profile is halfway to the goal at peak speed."""
    profile = TrapezoidProfile(MotionConstraints(3.0, 2.0), 10.0)
    mid = profile.calculate(profile.total_time() / 2.0)

    assert mid.position == pytest.approx(5.0)
    assert mid.velocity == pytest.approx(3.0)


def test_profile_respects_limits():
    constraints = MotionConstraints(3.0, 2.0)
    data = sample_profile(constraints, 10.0, dt=0.01)

    assert np.all(np.diff(data["position"]) >= -1e-12)
    assert np.all(data["position"] <= 10.0 + 1e-12)
    assert np.all(data["velocity"] <= 3.0 + 1e-12)
    assert np.all(data["velocity"] >= 0.0)

    # Acceleration between samples never exceeds the limit
    accel = np.diff(data["velocity"]) / 0.01
    assert np.all(np.abs(accel) <= 2.0 + 1e-6)


def test_zero_goal_profile_does_not_move():
    profile = TrapezoidProfile(MotionConstraints(3.0, 2.0), 0.0)

    assert profile.total_time() == 0.0
    state = profile.calculate(1.0)
    assert state.position == 0.0
    assert state.velocity == 0.0

# -----------------------------------------------------------------------------
# Tests for sample_profile
# -----------------------------------------------------------------------------

def test_sample_profile_arrays():
    data = sample_profile(MotionConstraints(3.0, 2.0), 4.0, dt=0.02)

    assert set(data) == {"t", "position", "velocity"}
    assert len(data["t"]) == len(data["position"]) == len(data["velocity"])
    assert data["t"][0] == 0.0
    assert np.isclose(data["position"][-1], 4.0, atol=1e-3)


def test_sample_profile_rejects_bad_dt():
    with pytest.raises(ValueError, match="dt must be positive"):
        sample_profile(MotionConstraints(3.0, 2.0), 4.0, dt=0.0)
