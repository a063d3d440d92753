import argparse
import logging
import time

from .PWMChannel import SYSFS_ROOT, PWMChannel, PWMError, PWMState

log = logging.getLogger(__name__)

DEFAULT_PERIOD_NS = 500_000
DEFAULT_DUTIES = [0.0, 50.0, 100.0, 50.0]  # in percent of the period


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="sysfs-pwm",
        description="Sweep the duty cycle of a sysfs PWM channel. "
        "The pin must already be configured for PWM (e.g. config-pin P9.21 pwm).",
    )
    parser.add_argument("--chip", type=int, default=0, help="pwmchip index")
    parser.add_argument("--channel", type=int, default=0, help="channel index within the chip")
    parser.add_argument("--period", type=int, default=DEFAULT_PERIOD_NS, help="period in ns")
    parser.add_argument(
        "--duty", type=float, nargs="+", default=DEFAULT_DUTIES,
        help="duty cycle percentages to step through",
    )
    parser.add_argument("--interval", type=float, default=0.7, help="seconds between steps")
    parser.add_argument("--cycles", type=int, default=0, help="number of sweeps, 0 runs forever")
    parser.add_argument("--sysfs-root", default=SYSFS_ROOT)
    parser.add_argument("--unexport", action="store_true", help="unexport the channel when done")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser.parse_args(argv)


def run(pwm: PWMChannel, period_ns: int, duties, interval: float, cycles: int,
        sleep=time.sleep) -> None:
    """Export ``pwm``, set its period and enable it, then step through ``duties``.

    The output is disabled again on the way out, also on Ctrl-C.
    """
    if not duties:
        raise ValueError("At least one duty cycle is required")

    pwm.set_export(True)
    pwm.set_period(period_ns)
    pwm.set_state(PWMState.ENABLED)

    try:
        done = 0
        while cycles == 0 or done < cycles:
            for duty in duties:
                pwm.write(duty)
                log.info("duty cycle %s%% (%dns)", duty, pwm.duty_cycle_ns)
                sleep(interval)
            done += 1

    except KeyboardInterrupt:
        log.info("Interrupted, disabling PWM...")

    finally:
        if pwm.state is PWMState.ENABLED:
            pwm.set_state(PWMState.DISABLED)


def main(argv=None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        pwm = PWMChannel(channel=args.channel, chip=args.chip, sysfs_root=args.sysfs_root)
        run(pwm, args.period, args.duty, args.interval, args.cycles)
        if args.unexport:
            pwm.set_export(False)
    except ValueError as err:
        log.error("Invalid argument: %s", err)
        return 2
    except PWMError as err:
        log.error("%s", err)
        return 1

    log.info("Done: %r", pwm)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
