import enum
import logging
import math
import os

log = logging.getLogger(__name__)

SYSFS_ROOT = "/sys/class/pwm"

U8_MAX = 0xFF
U32_MAX = 0xFFFFFFFF


class PWMState(enum.Enum):
    """Output state of a channel; the value is what the ``enable`` file takes."""

    ENABLED = "1"
    DISABLED = "0"


class PWMOperation(enum.Enum):
    EXPORT = "export"
    UNEXPORT = "unexport"
    PERIOD = "period"
    STATE = "state"
    DUTY_CYCLE = "duty cycle"


class PWMError(Exception):
    """A sysfs write for a PWM channel failed.

    ``operation`` tells which setter failed, ``chip``/``channel`` identify the
    channel, ``value`` is what was being written (``None`` for export and
    unexport) and ``error`` is the underlying ``OSError``, also available as
    ``__cause__``.
    """

    def __init__(self, message: str, operation: PWMOperation, chip: int, channel: int,
                 error: OSError, value=None):
        super().__init__(message)
        self.operation = operation
        self.chip = chip
        self.channel = channel
        self.value = value
        self.error = error


class PWMChannel:
    """One PWM channel of a ``pwmchipN`` controller, driven through sysfs.

    The pin has to be muxed to PWM mode beforehand (for example
    ``config-pin P9.21 pwm`` on a BeagleBone). Period, duty cycle and state
    are a cache of the last values this object wrote successfully; they are
    never read back from the kernel.
    """

    def __init__(self, channel: int, chip: int = 0, sysfs_root: str = SYSFS_ROOT):
        if not _is_int(channel) or not 0 <= channel <= U8_MAX:
            raise ValueError(f"Channel must be an integer between 0 and {U8_MAX}")
        if not _is_int(chip) or not 0 <= chip <= U8_MAX:
            raise ValueError(f"Chip must be an integer between 0 and {U8_MAX}")

        self._chip = chip
        self._channel = channel
        self.base_path = os.path.join(sysfs_root, f"pwmchip{chip}")
        self.channel_path = os.path.join(self.base_path, f"pwm{channel}")

        self._period_ns = 0
        self._duty_cycle_ns = 0
        self._state = PWMState.DISABLED

    @property
    def chip(self) -> int:
        return self._chip

    @property
    def channel(self) -> int:
        return self._channel

    @property
    def period_ns(self) -> int:
        return self._period_ns

    @property
    def duty_cycle_ns(self) -> int:
        return self._duty_cycle_ns

    @property
    def state(self) -> PWMState:
        return self._state

    def __repr__(self) -> str:
        return (
            f"PWMChannel(chip={self._chip}, channel={self._channel}, "
            f"period_ns={self._period_ns}, duty_cycle_ns={self._duty_cycle_ns}, "
            f"state={self._state.name})"
        )

    def _name(self) -> str:
        return f"PWM #{self._chip}-{self._channel}"

    def _write_once(self, path: str, value) -> None:
        log.debug("%s: writing %r to %s", self._name(), str(value), path)
        with open(path, "w") as f:
            f.write(str(value))

    def set_export(self, requested: bool) -> None:
        """Export (``True``) or unexport (``False``) the channel.

        Nothing is written when the channel directory already matches the
        request, so repeated calls are harmless.
        """
        exists = os.path.isdir(self.channel_path)

        if requested and not exists:
            operation, control = PWMOperation.EXPORT, "export"
        elif not requested and exists:
            operation, control = PWMOperation.UNEXPORT, "unexport"
        else:
            log.debug("%s: already %s", self._name(), "exported" if exists else "unexported")
            return

        try:
            self._write_once(os.path.join(self.base_path, control), self._channel)
        except OSError as err:
            raise PWMError(
                f"Failed to {control} {self._name()}: {err}",
                operation, self._chip, self._channel, err,
            ) from err

    def set_period(self, period_ns: int) -> None:
        """Set the period in nanoseconds."""
        _check_u32("Period", period_ns)
        try:
            self._write_once(os.path.join(self.channel_path, "period"), period_ns)
        except OSError as err:
            raise PWMError(
                f"Failed to set {self._name()} period to {period_ns}: {err}",
                PWMOperation.PERIOD, self._chip, self._channel, err, period_ns,
            ) from err
        self._period_ns = period_ns

    def set_state(self, state: PWMState) -> None:
        """Enable or disable the output."""
        if not isinstance(state, PWMState):
            raise ValueError(f"State must be a PWMState, not {state!r}")
        try:
            self._write_once(os.path.join(self.channel_path, "enable"), state.value)
        except OSError as err:
            raise PWMError(
                f"Failed to set {self._name()} state to {state.name}: {err}",
                PWMOperation.STATE, self._chip, self._channel, err, state,
            ) from err
        self._state = state

    def write(self, percentage: float) -> None:
        """Set the duty cycle as a percentage of the cached period.

        The result is truncated toward zero. With no period set yet this
        always writes 0. Percentages outside 0-100 are not clamped; the
        resulting value goes to the kernel unchanged and is cached as-is, so
        it can be negative or wider than 32 bits. NaN and infinite
        percentages raise ValueError.
        """
        if not math.isfinite(percentage):
            raise ValueError(f"Percentage must be finite, not {percentage}")
        duty_cycle_ns = int((percentage / 100.0) * self._period_ns)
        try:
            self._write_once(os.path.join(self.channel_path, "duty_cycle"), duty_cycle_ns)
        except OSError as err:
            raise PWMError(
                f"Failed to set {self._name()} duty cycle to {percentage}% "
                f"(aka {duty_cycle_ns}ns): {err}",
                PWMOperation.DUTY_CYCLE, self._chip, self._channel, err, duty_cycle_ns,
            ) from err
        self._duty_cycle_ns = duty_cycle_ns

    def set_duty_cycle(self, duty_cycle_ns: int) -> None:
        """Set the duty cycle in nanoseconds. Not checked against the period."""
        _check_u32("Duty cycle", duty_cycle_ns)
        try:
            self._write_once(os.path.join(self.channel_path, "duty_cycle"), duty_cycle_ns)
        except OSError as err:
            raise PWMError(
                f"Failed to set {self._name()} duty cycle to {duty_cycle_ns}ns: {err}",
                PWMOperation.DUTY_CYCLE, self._chip, self._channel, err, duty_cycle_ns,
            ) from err
        self._duty_cycle_ns = duty_cycle_ns


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _check_u32(name: str, value: int) -> None:
    if not _is_int(value) or not 0 <= value <= U32_MAX:
        raise ValueError(f"{name} must be an integer between 0 and {U32_MAX} ns")
