"""Domain enums for the terminal job lifecycle."""

from enum import Enum


class TerminalState(str, Enum):
    """Terminal state enumeration."""

    IDLE = "IDLE"
    SETUP = "SETUP"
    RUNNING = "RUNNING"
    PAUSED = "PAUSED"
    INSPECTION_REQUIRED = "INSPECTION_REQUIRED"

    @property
    def is_active(self) -> bool:
        """Check if the terminal is working on a job."""
        return self != TerminalState.IDLE

    def can_transition_to(self, target_state: "TerminalState") -> bool:
        """Check if the terminal can move from current state to target state."""
        valid_transitions = {
            TerminalState.IDLE: {TerminalState.IDLE, TerminalState.SETUP},
            TerminalState.SETUP: {
                TerminalState.SETUP,
                TerminalState.INSPECTION_REQUIRED,
                TerminalState.IDLE,
            },
            TerminalState.INSPECTION_REQUIRED: {
                TerminalState.INSPECTION_REQUIRED,
                TerminalState.RUNNING,
                TerminalState.IDLE,
            },
            TerminalState.RUNNING: {
                TerminalState.RUNNING,
                TerminalState.PAUSED,
                TerminalState.IDLE,
            },
            TerminalState.PAUSED: {
                TerminalState.INSPECTION_REQUIRED,
                TerminalState.RUNNING,
                TerminalState.IDLE,
            },
        }
        return target_state in valid_transitions.get(self, set())


class LogState(str, Enum):
    """Activity recorded by a job log."""

    SETUP = "SETUP"
    RUNNING = "RUNNING"
    PAUSED = "PAUSED"
    INSPECTION = "INSPECTION"

    @property
    def is_measured(self) -> bool:
        """Check if closing a log of this state produces an efficiency record."""
        return self in {LogState.SETUP, LogState.RUNNING}


class InspectionType(str, Enum):
    """Inspection type enumeration."""

    FIRST_OFF = "1st_off"
    IN_PROCESS = "in_process"


class JobStatus(str, Enum):
    """Job operation status enumeration."""

    UNSTARTED = "Unstarted"
    READY = "Ready"
    WIP = "WIP"
    COMPLETE = "Complete"

    @property
    def is_terminal(self) -> bool:
        return self == JobStatus.COMPLETE


class MetricType(str, Enum):
    """Efficiency metric type enumeration."""

    SETUP = "SETUP"
    RUNNING = "RUNNING"


class Role(str, Enum):
    """Permission flags checked by user authentication."""

    OPERATE = "can_operate"
    SETUP = "can_setup"
    INSPECT = "can_inspect"
    REMANUFACTURE = "can_remanufacture"
