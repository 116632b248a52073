"""Cache backends and the record store used by the Salesforce sync layer."""
