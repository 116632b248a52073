"""
Integrations layer.
This package contains all code used to communicate with external systems:
- Salesforce REST API (authentication, sObject reads/writes, SOQL)

Key rule:
- Application code MUST NOT call Salesforce directly.
- Go through SalesforceService (reference data) and ApplicationSync (upserts).
"""
