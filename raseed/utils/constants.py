"""
Shared names for collections, topics and classification tables.

Collections and topics are the contract with the request layer, which
creates records and publishes the events these workers consume.
"""

# Record store collections
COLLECTIONS = {
    'RECEIPTS': 'receipts',
    'QUERIES': 'queries',
    'WALLET_PASSES': 'wallet_passes',
    'STOCK_ITEMS': 'stock_items',
    'THIRD_PARTY_BILLS': 'third_party_bills',
}

# Event bus topics
TOPICS = {
    'RECEIPT_PROCESSING': 'receipt-processing',
    'QUERY_PROCESSING': 'query-processing',
    # Informational only; published by the request layer, no consumer here
    'WALLET_PASS_CREATION': 'wallet-pass-creation',
    'STOCK_MANAGEMENT': 'stock-management',
    'NOTIFICATION_EVENTS': 'notification-events',
    'THIRD_PARTY_INTEGRATION': 'third-party-integration',
}

# Actor that owns each topic's messages
TOPIC_ACTORS = {
    'receipt-processing': 'process_receipt',
    'query-processing': 'process_query',
    'stock-management': 'process_stock_management',
    'notification-events': 'deliver_notification',
    'third-party-integration': 'process_third_party_integration',
}

# Categories whose stock items get a wallet pass
PERISHABLE_CATEGORIES = frozenset({
    'dairy', 'produce', 'meat', 'seafood', 'bakery', 'frozen', 'beverages',
    'dairy_products', 'fruits', 'vegetables', 'meat_products', 'fish',
})

# Items within this many days of expiry are "expiring_soon"
EXPIRING_SOON_DAYS = 7

# Receipts included in the query prompt, newest first
QUERY_CONTEXT_RECEIPT_LIMIT = 10

# Query pass description is cut to this many characters of the response
PASS_DESCRIPTION_LIMIT = 100
