import itertools
import math

import pytest
from swerve_control.controller import DisplacementController, EpisodeState
from swerve_control.errors import ConfigurationError, EpisodeStateError, SensorFault
from swerve_control.feedback import FeedbackGains
from swerve_control.options import Brakes, EpisodeOptions, FieldOriented, StopMotors
from swerve_control.sim import SimulatedSwerveDrive


class ScriptedDrive(SimulatedSwerveDrive):
    """Drive whose odometry rises linearly by `step` meters per drive() call."""

    def __init__(self, step, **kwargs):
        super().__init__(**kwargs)
        self.step = step

    def drive(self, throttle, strafe, rotation):
        self._record("drive", throttle, strafe, rotation)
        self.time += self.dt
        self.distance += self.step


def fake_clock(period=0.02):
    counter = itertools.count()
    return lambda: next(counter) * period


@pytest.fixture
def mock_drive(mocker):
    drive = mocker.Mock()
    drive.get_field_oriented.return_value = False
    drive.get_distance_traveled.return_value = 0.0
    drive.get_yaw.return_value = 0.0
    return drive

# -----------------------------------------------------------------------------
# Construction
# -----------------------------------------------------------------------------

def test_zero_target_is_rejected(mock_drive):
    with pytest.raises(ConfigurationError, match="zero"):
        DisplacementController.cartes(mock_drive, 0.0, 0.0)


def test_configuration_error_is_value_error(mock_drive):
    with pytest.raises(ValueError):
        DisplacementController.polar(mock_drive, 0.0, 45.0)


def test_non_finite_target_is_rejected(mock_drive):
    with pytest.raises(ConfigurationError, match="finite"):
        DisplacementController.cartes(mock_drive, float("nan"), 1.0)


def test_construction_fixes_distance_and_ratios(mock_drive):
    controller = DisplacementController.cartes(mock_drive, 3.0, 3.0)

    assert controller.distance == pytest.approx(4.2426, abs=1e-4)
    assert controller.ratios == (1.0, 1.0)
    assert controller.state is EpisodeState.IDLE
    mock_drive.drive.assert_not_called()


@pytest.mark.parametrize("heading", range(0, 360, 15))
def test_polar_matches_cartesian(mock_drive, heading):
    distance = 2.5
    polar = DisplacementController.polar(mock_drive, distance, heading)
    rad = math.radians(heading)
    cartes = DisplacementController.cartes(mock_drive, distance * math.cos(rad), distance * math.sin(rad))

    assert polar.distance_x == pytest.approx(cartes.distance_x, abs=1e-12)
    assert polar.distance_y == pytest.approx(cartes.distance_y, abs=1e-12)
    assert polar.distance == pytest.approx(distance)
    assert polar.ratios == pytest.approx(cartes.ratios)

# -----------------------------------------------------------------------------
# Termination predicate
# -----------------------------------------------------------------------------

@pytest.mark.parametrize(
    "measured, finished",
    [(1.5, False), (1.95, True), (2.05, True), (2.20, False), (-1.95, True)],
)
def test_is_finished_uses_live_distance(mock_drive, measured, finished):
    controller = DisplacementController.cartes(
        mock_drive, 2.0, 0.0, gains=FeedbackGains(tolerance=0.10)
    )
    mock_drive.get_distance_traveled.return_value = measured

    assert controller.is_finished() is finished


def test_is_finished_ignores_feedback_goal_state(mock_drive):
    """The PID being at its goal does not end the episode."""
    controller = DisplacementController.cartes(mock_drive, 2.0, 0.0, clock=fake_clock(10.0))
    controller.setup()
    mock_drive.get_distance_traveled.return_value = 1.95
    controller.tick()
    assert controller.feedback.at_goal()

    mock_drive.get_distance_traveled.return_value = 1.0
    assert not controller.is_finished()

# -----------------------------------------------------------------------------
# Setup
# -----------------------------------------------------------------------------

def test_setup_sequence(mock_drive):
    options = EpisodeOptions(StopMotors.STOP, Brakes.ON, FieldOriented.ON)
    controller = DisplacementController.cartes(mock_drive, 1.0, 0.0, options)
    controller.setup()

    assert [c[0] for c in mock_drive.method_calls] == [
        "set_brake_mode",
        "reset_distance_traveled",
        "get_field_oriented",
        "toggle_field_oriented",
        "reset_yaw",
    ]
    mock_drive.set_brake_mode.assert_called_once_with(True)
    assert controller.state is EpisodeState.RUNNING


def test_setup_brakes_off(mock_drive):
    options = EpisodeOptions(brakes=Brakes.OFF)
    DisplacementController.cartes(mock_drive, 1.0, 0.0, options).setup()
    mock_drive.set_brake_mode.assert_called_once_with(False)


def test_setup_does_not_toggle_when_already_field_oriented(mock_drive):
    mock_drive.get_field_oriented.return_value = True
    options = EpisodeOptions(field_oriented=FieldOriented.ON)
    DisplacementController.cartes(mock_drive, 1.0, 0.0, options).setup()
    mock_drive.toggle_field_oriented.assert_not_called()


def test_setup_resets_stale_distance_before_first_tick():
    drive = SimulatedSwerveDrive(initial_distance=5.0)
    controller = DisplacementController.cartes(drive, 2.0, 0.0, clock=drive.clock)

    assert drive.get_distance_traveled() == 5.0
    controller.setup()
    controller.tick()

    assert controller.control.measurement == 0.0
    names = drive.call_names()
    assert names.index("reset_distance_traveled") < names.index("drive")


def test_setup_resets_feedback_state(mock_drive):
    controller = DisplacementController.cartes(mock_drive, 2.0, 0.0, clock=fake_clock())
    controller.feedback.integral = 0.7
    controller.feedback.prev_error = 0.3
    controller.setup()

    assert controller.feedback.integral == 0.0
    assert controller.feedback.prev_error is None


def test_setup_twice_raises(mock_drive):
    controller = DisplacementController.cartes(mock_drive, 1.0, 0.0)
    controller.setup()
    with pytest.raises(EpisodeStateError):
        controller.setup()


def test_tick_before_setup_raises(mock_drive):
    controller = DisplacementController.cartes(mock_drive, 1.0, 0.0)
    with pytest.raises(EpisodeStateError, match="tick"):
        controller.tick()

# -----------------------------------------------------------------------------
# Tick
# -----------------------------------------------------------------------------

def test_tick_drives_along_ratios_without_rotation(mock_drive):
    controller = DisplacementController.cartes(mock_drive, 3.0, -1.5, clock=fake_clock(0.5))
    controller.setup()
    controller.tick()  # t = 0.5s, setpoint 0.25m, measured 0

    throttle, strafe, rotation = mock_drive.drive.call_args[0]
    output = controller.feedback.output
    assert output > 0
    assert throttle == pytest.approx(output)
    assert strafe == pytest.approx(-0.5 * output)
    assert rotation == 0.0
    assert controller.control.iterations == 1


def test_tick_uses_distance_magnitude(mock_drive):
    controller = DisplacementController.cartes(mock_drive, 2.0, 0.0, clock=fake_clock())
    controller.setup()
    mock_drive.get_distance_traveled.return_value = -0.4
    controller.tick()

    assert controller.control.measurement == 0.4


def test_divergence_is_reported_not_fatal(mock_drive, caplog):
    controller = DisplacementController.cartes(mock_drive, 1.0, 0.0, clock=fake_clock())
    controller.setup()
    mock_drive.get_distance_traveled.return_value = 1.5
    controller.tick()

    assert controller.diverged
    assert "Tracking divergence" in caplog.text
    assert controller.state is EpisodeState.RUNNING

# -----------------------------------------------------------------------------
# Teardown
# -----------------------------------------------------------------------------

@pytest.mark.parametrize("interrupted", [False, True])
def test_teardown_restores_field_frame(interrupted):
    drive = SimulatedSwerveDrive(field_oriented=False)
    options = EpisodeOptions(field_oriented=FieldOriented.ON)
    controller = DisplacementController.cartes(drive, 1.0, 1.0, options, clock=drive.clock)

    controller.setup()
    assert drive.get_field_oriented()
    controller.tick()
    controller.teardown(interrupted=interrupted)

    assert drive.get_field_oriented() is False


@pytest.mark.parametrize("interrupted", [False, True])
def test_teardown_keeps_preexisting_field_frame(interrupted):
    drive = SimulatedSwerveDrive(field_oriented=True)
    options = EpisodeOptions(field_oriented=FieldOriented.ON)
    controller = DisplacementController.cartes(drive, 1.0, 1.0, options, clock=drive.clock)

    controller.setup()
    controller.teardown(interrupted=interrupted)

    assert drive.get_field_oriented() is True
    assert "toggle_field_oriented" not in drive.call_names()


def test_teardown_restores_frame_when_sensor_fails(mock_drive):
    options = EpisodeOptions(field_oriented=FieldOriented.ON)
    controller = DisplacementController.cartes(mock_drive, 1.0, 0.0, options)
    controller.setup()
    mock_drive.get_field_oriented.return_value = True
    mock_drive.get_distance_traveled.side_effect = RuntimeError("odometry offline")

    with pytest.raises(RuntimeError):
        controller.teardown(interrupted=True)

    assert mock_drive.toggle_field_oriented.call_count == 2
    assert controller.state is EpisodeState.ENDED


def test_teardown_stops_when_requested(mock_drive):
    controller = DisplacementController.cartes(mock_drive, 1.0, 0.0, EpisodeOptions(StopMotors.STOP))
    controller.setup()
    controller.teardown()
    mock_drive.stop.assert_called_once()


def test_teardown_dont_stop(mock_drive):
    controller = DisplacementController.cartes(
        mock_drive, 1.0, 0.0, EpisodeOptions(StopMotors.DONT_STOP)
    )
    controller.setup()
    controller.teardown()

    mock_drive.stop.assert_not_called()
    mock_drive.drive.assert_not_called()


def test_teardown_summary(mock_drive):
    controller = DisplacementController.cartes(mock_drive, 2.0, 0.0, clock=fake_clock())
    controller.setup()
    mock_drive.get_distance_traveled.return_value = 1.9
    controller.tick()
    summary = controller.teardown(interrupted=True)

    assert summary.target == pytest.approx(2.0)
    assert summary.actual == pytest.approx(1.9)
    assert summary.error_pct == pytest.approx(-5.0)
    assert summary.iterations == 1
    assert summary.interrupted is True
    assert summary.to_dict()["interrupted"] is True


def test_teardown_runs_once(mock_drive):
    controller = DisplacementController.cartes(mock_drive, 1.0, 0.0)
    controller.setup()
    first = controller.teardown()
    second = controller.teardown(interrupted=True)

    assert first is second
    mock_drive.stop.assert_called_once()


def test_teardown_before_setup_raises(mock_drive):
    controller = DisplacementController.cartes(mock_drive, 1.0, 0.0)
    with pytest.raises(EpisodeStateError, match="teardown"):
        controller.teardown()

# -----------------------------------------------------------------------------
# End-to-end
# -----------------------------------------------------------------------------

def test_diagonal_episode_terminates_in_band():
    """Odometry rises 0 -> 4.25m over 50 ticks; the 45 degree target ends in band."""
    drive = ScriptedDrive(step=4.25 / 50)
    controller = DisplacementController.cartes(drive, 3.0, 3.0, clock=drive.clock)

    assert controller.distance == pytest.approx(4.2426, abs=1e-4)
    assert controller.ratios == (1.0, 1.0)

    controller.setup()
    finished_at = None
    for _ in range(50):
        controller.tick()
        if controller.is_finished():
            finished_at = drive.get_distance_traveled()
            break
    controller.teardown()

    assert finished_at is not None
    assert 4.1426 <= finished_at <= 4.3426
    # 4.25 * 48 / 50 = 4.08 is the last reading outside the band
    assert controller.control.iterations == 49

    drive_calls = [args for name, args in drive.calls if name == "drive"]
    assert len(drive_calls) == 49
    for throttle, strafe, rotation in drive_calls:
        assert throttle == strafe
        assert rotation == 0.0


def test_dont_stop_episode_never_forces_stop():
    drive = ScriptedDrive(step=4.25 / 50)
    options = EpisodeOptions(stop=StopMotors.DONT_STOP)
    controller = DisplacementController.cartes(drive, 3.0, 3.0, options, clock=drive.clock)

    controller.setup()
    while not controller.is_finished():
        controller.tick()
    calls_before_teardown = len(drive.calls)
    controller.teardown()

    assert "stop" not in drive.call_names()
    # No drive(0, 0, 0) or other actuation issued by teardown
    assert drive.calls[calls_before_teardown:] == []


def test_setup_restores_frame_when_yaw_reset_fails(mock_drive):
    mock_drive.reset_yaw.side_effect = SensorFault("gyro offline")
    options = EpisodeOptions(field_oriented=FieldOriented.ON)
    controller = DisplacementController(mock_drive, 1.0, 1.0, options)

    def toggled_on():
        return mock_drive.toggle_field_oriented.call_count % 2 == 1

    mock_drive.get_field_oriented.side_effect = toggled_on

    with pytest.raises(SensorFault):
        controller.setup()

    assert mock_drive.toggle_field_oriented.call_count == 2
    assert controller.state is EpisodeState.IDLE


def test_diagnostics_carry_tolerance(mock_drive):
    controller = DisplacementController(mock_drive, 2.0, 0.0, gains=FeedbackGains(tolerance=0.3))
    controller.setup()
    controller.tick()

    assert controller.get_diagnostics()["tolerance"] == 0.3
