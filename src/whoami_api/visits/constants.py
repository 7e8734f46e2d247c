"""Visit accounting constants."""

LEDGER_TOTAL_FIELD = "total"
LEDGER_CLIENTS_FIELD = "byClient"
# Documents written before the rename used this key for the per-client map.
LEGACY_CLIENTS_FIELD = "byIp"

UPDATE_FAILED_MESSAGE = "Failed to update visits"
READ_FAILED_MESSAGE = "Failed to read visits"
NOT_PERSISTED_MESSAGE = "Visit was counted but could not be persisted"
