"""Minimal ABIs for the order-book marketplace and the ERC-1155 items contract."""

MARKETPLACE_ABI: list[dict] = [
    {
        "inputs": [
            {
                "components": [
                    {"internalType": "enum IOrderBook.OrderSide", "name": "side", "type": "uint8"},
                    {"internalType": "uint256", "name": "tokenId", "type": "uint256"},
                    {"internalType": "uint72", "name": "price", "type": "uint72"},
                    {"internalType": "uint24", "name": "quantity", "type": "uint24"},
                ],
                "internalType": "struct IOrderBook.LimitOrder[]",
                "name": "orders",
                "type": "tuple[]",
            }
        ],
        "name": "limitOrders",
        "outputs": [],
        "stateMutability": "nonpayable",
        "type": "function",
    },
    {
        "inputs": [{"internalType": "uint256", "name": "tokenId", "type": "uint256"}],
        "name": "getLowestAsk",
        "outputs": [{"internalType": "uint72", "name": "", "type": "uint72"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [{"internalType": "uint256", "name": "tokenId", "type": "uint256"}],
        "name": "getHighestBid",
        "outputs": [{"internalType": "uint72", "name": "", "type": "uint72"}],
        "stateMutability": "view",
        "type": "function",
    },
]

ERC1155_ABI: list[dict] = [
    {
        "inputs": [
            {"name": "account", "type": "address"},
            {"name": "id", "type": "uint256"},
        ],
        "name": "balanceOf",
        "outputs": [{"name": "", "type": "uint256"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [
            {"name": "operator", "type": "address"},
            {"name": "approved", "type": "bool"},
        ],
        "name": "setApprovalForAll",
        "outputs": [],
        "stateMutability": "nonpayable",
        "type": "function",
    },
    {
        "inputs": [
            {"name": "account", "type": "address"},
            {"name": "operator", "type": "address"},
        ],
        "name": "isApprovedForAll",
        "outputs": [{"name": "", "type": "bool"}],
        "stateMutability": "view",
        "type": "function",
    },
]
