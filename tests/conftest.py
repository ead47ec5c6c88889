import sys
from pathlib import Path

import contracting
import pytest
from contracting.client import ContractingClient

PROJECT_ROOT = Path(__file__).resolve().parents[1]
CONTRACT_PATH = PROJECT_ROOT / "con_confidential_counter.py"
SUBMISSION_PATH = (
    Path(contracting.__file__).resolve().parent / "contracts" / "submission.s.py"
)

if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

import deploy  # noqa: E402


@pytest.fixture(scope="session", autouse=True)
def enable_sha3_and_whitelist():
    deploy.enable_contract_builtins()


@pytest.fixture
def client():
    client = ContractingClient(signer="owner", metering=False)
    client.flush()
    client.set_submission_contract(str(SUBMISSION_PATH))
    yield client
    client.flush()


@pytest.fixture
def submit_counter(client):
    def submit(name="con_confidential_counter"):
        client.submit(CONTRACT_PATH.read_text(), name=name, owner=None)
        return client.get_contract(name)
    return submit


@pytest.fixture
def contract(submit_counter):
    return submit_counter()
