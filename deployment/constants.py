from pathlib import Path

import deployment

#
# Filesystem
#

DEPLOYMENT_DIR = Path(deployment.__file__).parent
CONSTRUCTOR_PARAMS_DIR = DEPLOYMENT_DIR / "constructor_params"
ARTIFACTS_DIR = DEPLOYMENT_DIR / "artifacts"

#
# Domains
#

LOCAL = "local"
SEPOLIA = "sepolia"
MAINNET = "mainnet"

SUPPORTED_BELDEX_DOMAINS = [LOCAL, SEPOLIA, MAINNET]

LOCAL_BLOCKCHAIN_ENVIRONMENTS = ["local"]

#
# Explorer / providers
#

ETHERSCAN_API_KEY_ENVVAR = "ETHERSCAN_API_KEY"
INFURA_PROVIDER_NAME = "infura"

#
# Contracts
#

UTILS = "Utils"
BELDEX_IP = "BeldexIP"
BELDEX_REDEEM = "BeldexRedeem"
BELDEX_TRANSFER = "BeldexTransfer"
BELDEX_ETH = "BeldexETH"

BELDEX_CONTRACTS = [UTILS, BELDEX_IP, BELDEX_REDEEM, BELDEX_TRANSFER, BELDEX_ETH]

# Opaque decimal string; never routed through a float.
BELDEX_ETH_AMOUNT = "10000000000000000"
