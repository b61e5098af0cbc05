"""
Contract ABIs used by the bot.

Only the functions the bot calls are declared.
"""

UNISWAP_V2_PAIR_ABI = [
    {
        "constant": True,
        "inputs": [],
        "name": "token0",
        "outputs": [{"name": "", "type": "address"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "constant": True,
        "inputs": [],
        "name": "token1",
        "outputs": [{"name": "", "type": "address"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "constant": True,
        "inputs": [],
        "name": "getReserves",
        "outputs": [
            {"name": "reserve0", "type": "uint112"},
            {"name": "reserve1", "type": "uint112"},
            {"name": "blockTimestampLast", "type": "uint32"},
        ],
        "stateMutability": "view",
        "type": "function",
    },
]

ARBITRAGE_CONTRACT_ABI = [
    {
        "inputs": [
            {"name": "flashLoanToken", "type": "address"},
            {"name": "flashLoanAmount", "type": "uint256"},
            {"name": "dexRouterA", "type": "address"},
            {"name": "dexRouterB", "type": "address"},
            {"name": "tradeToken", "type": "address"},
        ],
        "name": "executeArbitrage",
        "outputs": [],
        "stateMutability": "nonpayable",
        "type": "function",
    },
    {
        "inputs": [{"name": "token", "type": "address"}],
        "name": "withdraw",
        "outputs": [],
        "stateMutability": "nonpayable",
        "type": "function",
    },
    {
        "inputs": [],
        "name": "owner",
        "outputs": [{"name": "", "type": "address"}],
        "stateMutability": "view",
        "type": "function",
    },
    {"inputs": [], "name": "InsufficientProfit", "type": "error"},
]

# Revert data for a custom error starts with keccak256("Name()")[:4]
INSUFFICIENT_PROFIT_SIGNATURE = "InsufficientProfit()"
