import logging
from collections import namedtuple

log = logging.getLogger(__name__)

# ---- Chain-constant parameters (mirror contract) ----

UINT32 = 2**32

MIN_VALUE = 1
MAX_VALUE = 1000

RANGE_MESSAGE = f"Value must be between {MIN_VALUE} and {MAX_VALUE}"

INFO = 'info'
SUCCESS = 'success'
ERROR = 'error'

Status = namedtuple('Status', ['level', 'message'])


class CounterError(Exception):
    """Base class for client-side counter errors."""


class ValidationError(CounterError, ValueError):
    """Input rejected before anything is submitted."""


class NetworkError(CounterError):
    """Provider missing or connected to the wrong chain."""


# ---- Input validation --------------------------------------------------------

def parse_value(raw) -> int:
    """
    Parse user input (int or numeric string) into an int.
    Floats and booleans are rejected rather than truncated.
    """
    if isinstance(raw, bool):
        raise ValidationError(RANGE_MESSAGE)
    if isinstance(raw, int):
        return raw
    if isinstance(raw, str):
        try:
            return int(raw.strip())
        except ValueError:
            raise ValidationError(RANGE_MESSAGE) from None
    raise ValidationError(RANGE_MESSAGE)


def validate_value(value) -> int:
    value = parse_value(value)
    if value < MIN_VALUE or value > MAX_VALUE:
        raise ValidationError(RANGE_MESSAGE)
    return value


# ---- Call builders -----------------------------------------------------------

def build_add(value):
    """
    Returns kwargs for contract.add_to_counter():
        (value,)
    Raises ValidationError for values outside [MIN_VALUE, MAX_VALUE].
    """
    return {'value': validate_value(value)}


def build_threshold(threshold):
    """
    Returns kwargs for contract.is_counter_above_threshold():
        (threshold,)
    The threshold is any uint32.
    """
    threshold = parse_value(threshold)
    if threshold < 0 or threshold >= UINT32:
        raise ValidationError(f"Threshold must be between 0 and {UINT32 - 1}")
    return {'threshold': threshold}


def revert_reason(exc: BaseException) -> str:
    reason = str(exc).strip()
    return reason or exc.__class__.__name__


# ---- Session: one action at a time ------------------------------------------

class CounterSession:
    """
    Drives the counter for a single account.

    Every action follows the same linear path: validate locally, submit,
    re-read the views, update the cached state, and finish with one
    `Status`. Failures are terminal for that action and never retried.
    """
    def __init__(self, contract, account: str):
        self.contract = contract
        self.account = account
        self.public_total = 0
        self.contribution = None
        self.status = None
        self.busy = False
        self.history = []

    def notify(self, level: str, message: str) -> Status:
        self.status = Status(level, message)
        self.history.append(self.status)
        return self.status

    def run(self, description: str, action) -> Status:
        if self.busy:
            return self.notify(ERROR, "Another action is still in progress")
        if self.contract is None:
            return self.notify(ERROR, "Contract is not connected")

        self.busy = True
        self.notify(INFO, description)
        try:
            message = action()
        except ValidationError as e:
            return self.notify(ERROR, str(e))
        except AssertionError as e:
            log.info("transaction from %s reverted: %s", self.account, revert_reason(e))
            return self.notify(ERROR, f"Transaction reverted: {revert_reason(e)}")
        except Exception as e:
            log.exception("%s failed for %s", description, self.account)
            return self.notify(ERROR, f"Error: {e}")
        finally:
            self.busy = False
        return self.notify(SUCCESS, message)

    def refresh(self):
        self.public_total = self.contract.get_public_total()
        self.contribution = self.contract.get_user_contribution(address=self.account)
        log.debug("refreshed %s: total=%s contribution=%s", self.account, self.public_total, self.contribution)
        return self.public_total

    def add(self, value) -> Status:
        def action():
            kwargs = build_add(value)
            self.contract.add_to_counter(signer=self.account, **kwargs)
            self.refresh()
            return f"Added {kwargs['value']} to the counter"
        return self.run("Adding to counter...", action)

    def add_random(self) -> Status:
        def action():
            added = self.contract.add_random_to_counter(signer=self.account)
            self.refresh()
            return f"Random value {added} added"
        return self.run("Adding random value...", action)

    def reset(self) -> Status:
        def action():
            self.contract.reset_counter(signer=self.account)
            self.refresh()
            return "Counter reset"
        return self.run("Resetting counter...", action)

    def reveal_total(self) -> Status:
        def action():
            self.refresh()
            return f"Counter revealed: {self.public_total} (Global Total)"
        return self.run("Revealing counter...", action)

    def reveal_contribution(self) -> Status:
        def action():
            self.contribution = self.contract.decrypt_my_contribution(signer=self.account)
            return f"Your contribution: {self.contribution}"
        return self.run("Revealing your contribution...", action)

    def check_threshold(self, threshold) -> Status:
        def action():
            kwargs = build_threshold(threshold)
            above = self.contract.is_counter_above_threshold(signer=self.account, **kwargs)
            relation = "above" if above else "not above"
            return f"Counter is {relation} {kwargs['threshold']}"
        return self.run("Checking threshold...", action)
