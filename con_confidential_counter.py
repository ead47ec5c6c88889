"""
CONFIDENTIAL COUNTER

An owner-gated uint32 accumulator with per-caller contribution tracking.
Values are plain integers; "encrypted" views return opaque sha3 handles
derived from the plaintext, not ciphertexts.

Invariant (between resets):
  - public_total == sum(contributions[epoch, *]) mod 2**32
"""

# -----------------------------------------------------------------------------
# Parameters & Helpers
# -----------------------------------------------------------------------------

UINT32 = 2**32

MIN_VALUE = 1
MAX_VALUE = 1000

OP_ADD = 0
OP_SUB = 1
OP_MUL = 2

OWNER_ONLY = 'Only the owner can call this function'
OUT_OF_RANGE = 'Value out of uint32 range'

def domain_hash(*parts):
    s = "|".join(str(x) for x in parts)
    return hashlib.sha3("XCNT:v1|" + s)

def wrap(value: int):
    return value % UINT32

def make_handle(tag: str, *parts):
    return '0x' + domain_hash("handle", tag, *parts)[:64]

# -----------------------------------------------------------------------------
# State
# -----------------------------------------------------------------------------

# name / owner
metadata = Hash()

public_total = Variable()

# bumped on every reset; contributions from older epochs are orphaned
epoch = Variable()

# (epoch, address) -> int
contributions = Hash(default_value=0)

# scratch register for perform_operation
operation_result = Variable()

random_nonce = Variable()

# Events
CounterIncrementedEvent = LogEvent('CounterIncremented', {
    'user': {'type': str, 'idx': True},
    'value': {'type': int},
    'public_total': {'type': int}
})

RandomValueAddedEvent = LogEvent('RandomValueAdded', {
    'user': {'type': str, 'idx': True},
    'public_total': {'type': int}
})

CounterResetEvent = LogEvent('CounterReset', {
    'owner': {'type': str, 'idx': True},
    'epoch': {'type': int}
})

ThresholdCheckedEvent = LogEvent('ThresholdChecked', {
    'user': {'type': str, 'idx': True},
    'threshold': {'type': int},
    'result': {'type': bool}
})

MaxValueComputedEvent = LogEvent('MaxValueComputed', {
    'user': {'type': str, 'idx': True},
    'value': {'type': int},
    'max_value': {'type': int}
})

# -----------------------------------------------------------------------------
# Construction
# -----------------------------------------------------------------------------

@construct
def seed():
    metadata['name'] = "Confidential Counter"
    metadata['owner'] = ctx.caller

    public_total.set(0)
    epoch.set(0)
    operation_result.set(0)
    random_nonce.set(0)

# -----------------------------------------------------------------------------
# Views
# -----------------------------------------------------------------------------

@export
def get_owner():
    return metadata['owner']

@export
def get_metadata():
    return {
        'name': metadata['name'],
        'owner': metadata['owner'],
        'public_total': public_total.get(),
        'epoch': epoch.get()
    }

@export
def get_public_total():
    return public_total.get()

@export
def get_user_contribution(address: str):
    return contributions[epoch.get(), address]

@export
def decrypt_my_contribution():
    return contributions[epoch.get(), ctx.caller]

@export
def get_encrypted_counter():
    return make_handle("counter", epoch.get(), public_total.get())

@export
def get_encrypted_user_contribution(address: str):
    return make_handle("contribution", epoch.get(), address, contributions[epoch.get(), address])

# -----------------------------------------------------------------------------
# Core: accumulation
# -----------------------------------------------------------------------------

def assert_owner():
    assert ctx.caller == metadata['owner'], OWNER_ONLY

def accumulate(user: str, value: int):
    current_epoch = epoch.get()
    contributions[current_epoch, user] = wrap(contributions[current_epoch, user] + value)
    total = wrap(public_total.get() + value)
    public_total.set(total)
    return total

def next_random(user: str):
    nonce = random_nonce.get() + 1
    random_nonce.set(nonce)
    digest = domain_hash("rand", user, epoch.get(), nonce, public_total.get())
    return int(digest[:8], 16) % (MAX_VALUE - MIN_VALUE + 1) + MIN_VALUE

@export
def add_to_counter(value: int):
    assert MIN_VALUE <= value <= MAX_VALUE, 'Value must be between 1 and 1000'

    total = accumulate(ctx.caller, value)

    CounterIncrementedEvent({
        'user': ctx.caller,
        'value': value,
        'public_total': total
    })
    return total

@export
def add_random_to_counter():
    value = next_random(ctx.caller)
    total = accumulate(ctx.caller, value)

    RandomValueAddedEvent({
        'user': ctx.caller,
        'public_total': total
    })
    return value

@export
def reset_counter():
    assert_owner()

    public_total.set(0)
    new_epoch = epoch.get() + 1
    epoch.set(new_epoch)

    CounterResetEvent({
        'owner': ctx.caller,
        'epoch': new_epoch
    })

# -----------------------------------------------------------------------------
# Comparison & arithmetic helpers
# -----------------------------------------------------------------------------

@export
def is_counter_above_threshold(threshold: int):
    assert 0 <= threshold < UINT32, OUT_OF_RANGE

    result = public_total.get() > threshold

    ThresholdCheckedEvent({
        'user': ctx.caller,
        'threshold': threshold,
        'result': result
    })
    return result

@export
def get_max_value(value: int):
    assert 0 <= value < UINT32, OUT_OF_RANGE

    total = public_total.get()
    result = total if total > value else value

    MaxValueComputedEvent({
        'user': ctx.caller,
        'value': value,
        'max_value': result
    })
    return result

@export
def perform_operation(operation: int, value: int):
    current = operation_result.get()
    if operation == OP_ADD:
        result = current + value
    elif operation == OP_SUB:
        result = current - value
    elif operation == OP_MUL:
        result = current * value
    else:
        assert False, 'Invalid operation'

    result = wrap(result)
    operation_result.set(result)
    return result

@export
def conditional_operation(condition: bool, value_if_true: int, value_if_false: int):
    if condition:
        return value_if_true
    return wrap(value_if_true + value_if_false)

# -----------------------------------------------------------------------------
# Invariants / Utilities
# -----------------------------------------------------------------------------

@export
def verify_total_invariant():
    # Sum of current-epoch contributions should equal public_total
    current_epoch = epoch.get()
    total = 0
    count = 0
    items = contributions.all(current_epoch)
    for v in items:
        if v is not None:
            total = total + int(v)
            count += 1
    expected = public_total.get()
    return {
        'ok': wrap(total) == expected,
        'sum': wrap(total),
        'expected': expected,
        'contributors': count
    }
