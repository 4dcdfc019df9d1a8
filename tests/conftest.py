import asyncio
from types import SimpleNamespace

import pytest

# Common constants
UTILS_ADDRESS = "0xAAAaaaAAAaaaAAAaaaAAAaaaAAAaaaAAAaaaAAAa"
BELDEX_IP_ADDRESS = "0xBBBbbbBBBbbbBBBbbbBBBbbbBBBbbbBBBbbbBBBb"
BELDEX_REDEEM_ADDRESS = "0xCCCcccCCCcccCCCcccCCCcccCCCcccCCCcccCCCc"
BELDEX_TRANSFER_ADDRESS = "0xDDDdddDDDdddDDDdddDDDdddDDDdddDDDdddDDDd"
BELDEX_ETH_ADDRESS = "0xEEEeeeEEEeeeEEEeeeEEEeeeEEEeeeEEEeeeEEEe"

ADDRESSES = {
    "Utils": UTILS_ADDRESS,
    "BeldexIP": BELDEX_IP_ADDRESS,
    "BeldexRedeem": BELDEX_REDEEM_ADDRESS,
    "BeldexTransfer": BELDEX_TRANSFER_ADDRESS,
    "BeldexETH": BELDEX_ETH_ADDRESS,
}


class MockDeployerHandle:
    """
    Records every deployment as 'start'/'done' events. Each deployment yields to the
    event loop before completing so that concurrent deployments interleave.
    """

    def __init__(self, addresses=None, failures=None):
        self.addresses = dict(ADDRESSES if addresses is None else addresses)
        self.failures = failures or dict()
        self.calls = list()
        self.events = list()

    async def deploy(self, contract_name, *args):
        self.calls.append((contract_name, *args))
        self.events.append(("start", contract_name))
        await asyncio.sleep(0)
        if contract_name in self.failures:
            self.events.append(("failed", contract_name))
            raise self.failures[contract_name]
        self.events.append(("done", contract_name))
        return SimpleNamespace(address=self.addresses[contract_name])

    def deployed_names(self):
        return [name for event, name in self.events if event == "done"]

    def index(self, event, contract_name):
        return self.events.index((event, contract_name))


# Fixtures
@pytest.fixture
def deployer_handle():
    return MockDeployerHandle()
