"""Salesforce CRM integration adapter for the loan origination platform."""

__version__ = "1.0.0"
