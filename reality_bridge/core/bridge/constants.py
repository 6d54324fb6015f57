"""Static chain and contract metadata for the bridge subsystem."""

from typing import Any, Dict

CHAIN_METADATA: Dict[str, Dict[str, Any]] = {
    'ethereum': {
        'name': 'Ethereum',
        'chain_id': '0x1',          # 1
        'native_symbol': 'ETH',
    },
    'sepolia': {
        'name': 'Sepolia',
        'chain_id': '0xaa36a7',     # 11155111
        'native_symbol': 'ETH',
    },
    'gnosis': {
        'name': 'Gnosis',
        'chain_id': '0x64',         # 100
        'native_symbol': 'xDAI',
    },
    'polygon': {
        'name': 'Polygon',
        'chain_id': '0x89',         # 137
        'native_symbol': 'MATIC',
    },
    'arbitrum': {
        'name': 'Arbitrum',
        'chain_id': '0xa4b1',       # 42161
        'native_symbol': 'ETH',
    },
    'arbitrum sepolia': {
        'name': 'Arbitrum Sepolia',
        'chain_id': '0x66eee',      # 421614
        'native_symbol': 'ETH',
        'aliases': ['arbitrum_sepolia'],
    },
    'optimism': {
        'name': 'Optimism',
        'chain_id': '0xa',          # 10
        'native_symbol': 'ETH',
    },
    'base': {
        'name': 'Base',
        'chain_id': '0x2105',       # 8453
        'native_symbol': 'ETH',
    },
}

# Reality.eth deployments used when the bridge feed has no mainnet record for a chain
KNOWN_ORACLE_ADDRESSES: Dict[str, str] = {
    'ethereum': '0x325a2e0F3CCA2ddbaeBB4DfC38Df8D19ca165b47',
    'sepolia': '0xB7982f20CC159a40eba4b0eA86fd6cbA6Ff810e1',
    'gnosis': '0xEb51d9d9717906c981C57af09C4a3449eF30705b',
    'polygon': '0x60573B8DcE539aE5bF9aD7932310668997ef0428',
}

# Kleros court arbitrators offered by default when creating a question
DEFAULT_ARBITRATORS: Dict[str, str] = {
    'ethereum': '0x988b3A538b618C7A603e1c11Ab82Cd16dbE28069',
    'gnosis': '0x68154EA682f95BF582b80Dd6453FA401737491Dc',
    'polygon': '0x5AFa42b30955f137e10f89dfb5EF1542a186F90e',
}

DEFAULT_ARBITRATOR_CHAIN = 'ethereum'

# Bridge feed column names
FEED_HOME_CHAIN = 'Home Chain'
FEED_HOME_PROXY = 'Home Proxy'
FEED_FOREIGN_CHAIN = 'Foreign Chain'
FEED_FOREIGN_PROXY = 'Foreign Proxy'
FEED_ORACLE = 'Oracle'
FEED_NAME = 'Name'
FEED_APPEALS = 'Appeals'
FEED_TESTNET = 'Testnet'
FEED_TESTNET_YES = 'Yes'
