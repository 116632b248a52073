"""
Push loan applications into Salesforce.

Each upsert PATCHes the existing record when the entity already carries a
Salesforce id, and POSTs a new one otherwise. After a successful create the new
id is written back onto the entity and handed to the RecordStore.

Relation fields (Opportunity__c, Facility__c) and OwnerId are only sent on
create; Salesforce rejects changes to them on update.

Return values follow the adapter-wide contract: the decoded response on
success, {} when the remote call failed, False when a precondition is missing
(no email, no opportunity id, ...).
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Union

from crm_bridge.database.records import InMemoryRecordStore, RecordStore
from crm_bridge.integrations.contracts.lending import Application, CompanyOwner, Owner
from crm_bridge.integrations.contracts.salesforce import parse_save_result
from crm_bridge.integrations.salesforce.mapping import FieldMapper, resolve_owner_id
from crm_bridge.integrations.salesforce.query import soql_quote
from crm_bridge.integrations.salesforce.service import SalesforceService

logger = logging.getLogger(__name__)

Response = Union[Dict[str, Any], bool]


def short_id(sf_id: str) -> str:
    """18-char case-safe id -> 15-char id."""
    return sf_id[:-3] if len(sf_id) == 18 else sf_id


class ApplicationSync:
    def __init__(
        self,
        service: SalesforceService,
        store: Optional[RecordStore] = None,
        mapper: Optional[FieldMapper] = None,
    ) -> None:
        self.service = service
        self.client = service.client
        self.store = store or InMemoryRecordStore()
        self.mapper = mapper or FieldMapper(service.config)
        self.org = service.config.org

    def _create(self, endpoint: str, payload: Dict[str, Any], entity: Any, attr: str) -> Dict[str, Any]:
        """POST a new record and persist its id on ``entity.<attr>``."""
        response = self.client.post_data(endpoint, payload)
        saved = parse_save_result(response)
        if saved is not None:
            setattr(entity, attr, saved.id)
            self.store.save(entity)
        return response

    # ------------------------------------------------------------------ #
    # Account / contact
    # ------------------------------------------------------------------ #
    def upsert_account(self, application: Application) -> Response:
        company = application.company
        if company is None:
            logger.warning("Salesforce account cannot be synced for application #%s: no company", application.id)
            return False

        # Reuse the account the applicant's contact already belongs to.
        if not company.sf_id and application.applicant.sf_id and application.applicant.email:
            account_id = self.service.find_id_by_email("Contact", application.applicant.email, field="AccountId")
            if account_id:
                company.sf_id = account_id
                self.store.save(company)

        payload = self.mapper.account(application)
        if company.sf_id:
            return self.client.patch_data(f"/sobjects/Account/{company.sf_id}", payload)

        owner_id = resolve_owner_id(application)
        if owner_id:
            payload["OwnerId"] = owner_id
        return self._create("/sobjects/Account", payload, company, "sf_id")

    def upsert_contact(self, company_owner: CompanyOwner, application: Application) -> Response:
        owner: Owner = company_owner.owner
        if not owner.email:
            return False

        if not owner.sf_id:
            contact_id = self.service.find_id_by_email("Contact", owner.email)
            if contact_id:
                owner.sf_id = contact_id
                self.store.save(owner)

        payload = self.mapper.contact(company_owner, application)
        owner_id = resolve_owner_id(application)
        if owner_id:
            payload["OwnerId"] = owner_id

        if owner.sf_id:
            return self.client.patch_data(f"/sobjects/Contact/{owner.sf_id}", payload)
        return self._create("/sobjects/Contact", payload, owner, "sf_id")

    # ------------------------------------------------------------------ #
    # Lead
    # ------------------------------------------------------------------ #
    def upsert_lead(self, application: Application, lead_id: Optional[str] = None) -> Dict[str, Any]:
        payload = self.mapper.lead(application)
        if lead_id:
            return self.client.patch_data(f"/sobjects/Lead/{lead_id}", payload)
        return self.client.post_data("/sobjects/Lead/", payload)

    def attempt_lead_conversion(self, application: Application) -> Response:
        """Convert the applicant's lead (found by email), if there is one."""
        email = application.applicant.email
        if not email:
            logger.warning("Cannot convert Salesforce lead without an email address - application #%s", application.id)
            return False

        lead_id = self.service.find_id_by_email("Lead", email)
        if not lead_id:
            return False
        return self.convert_lead(lead_id, application)

    def convert_lead(self, lead_id: str, application: Application) -> Response:
        lead = self.service.get_lead(lead_id)
        if not lead.get("Id"):
            logger.warning("Lead ID %s not found for application #%s", lead_id, application.id)
            return False
        if lead.get("IsConverted"):
            logger.warning("Lead ID %s was already converted for application #%s", lead_id, application.id)
            return False

        if not lead.get("Use_of_Proceeds__c") or not lead.get("Submission_Id__c"):
            self.client.patch_data(f"/sobjects/Lead/{lead_id}", self.mapper.lead_conversion_fields(lead, application))

        return self.client.post_apex(self.org.lead_converter_endpoint, {"leadId": lead_id})

    # ------------------------------------------------------------------ #
    # Opportunity and children
    # ------------------------------------------------------------------ #
    def upsert_opportunity(self, application: Application) -> Union[Application, Dict[str, Any], bool]:
        """PATCH response on update; the application (with sf_id set) on create."""
        if not application.applicant.email:
            logger.warning(
                "Salesforce opportunity cannot be created due to missing applicant email - application #%s",
                application.id,
            )
            return False
        company = application.company
        if company is None or not company.sf_id:
            logger.warning(
                "Salesforce opportunity cannot be created due to missing account ID - application #%s",
                application.id,
            )
            return False

        payload = self.mapper.opportunity(application)
        if application.sf_id:
            return self.client.patch_data(f"/sobjects/Opportunity/{short_id(application.sf_id)}", payload)

        owner_id = resolve_owner_id(application)
        if owner_id:
            payload["OwnerId"] = owner_id

        self._create("/sobjects/Opportunity/", payload, application, "sf_id")
        if application.sf_id:
            return application

        logger.error("Opportunity creation failed for application #%s. No opportunity ID in response.", application.id)
        return False

    def upsert_facility(self, application: Application) -> Response:
        payload = self.mapper.facility(application)
        if application.sf_facility:
            return self.client.patch_data(f"/sobjects/Facility__c/{application.sf_facility}", payload)

        if not application.sf_id:
            logger.warning(
                "Facility cannot be created for application #%s because there is no opportunity ID.",
                application.id,
            )
            return False

        payload["Opportunity__c"] = application.sf_id
        return self._create("/sobjects/Facility__c", payload, application, "sf_facility")

    def update_application_status(self, application: Application, last_page: Optional[str] = None) -> Response:
        if not application.sf_id:
            return False
        payload = self.mapper.status(application, last_page)
        return self.client.patch_data(f"/sobjects/Opportunity/{short_id(application.sf_id)}", payload)

    def update_facility_status(self, application: Application) -> Response:
        if not application.sf_facility:
            return False
        payload = self.mapper.status(application, facility=True)
        return self.client.patch_data(f"/sobjects/Facility__c/{short_id(application.sf_facility)}", payload)

    def create_broker_role(self, application: Application) -> Dict[str, Any]:
        """Attach the referral partner's primary contact to the opportunity."""
        account = application.account
        if not application.sf_id or application.account_id == 1 or account is None or not account.sf_account:
            logger.warning(
                "Cannot create Salesforce broker role without opportunity ID and broker account - %s",
                application.id,
            )
            return {}

        contact = self.service.first_record(
            f"SELECT Id,Name FROM Contact WHERE AccountId={soql_quote(account.sf_account)} "
            "ORDER BY Is_Authorized_Signer__c DESC LIMIT 1"
        )
        if not contact or not contact.get("Id"):
            logger.warning(
                "Cannot create Salesforce broker contact role for application #%s: no contacts found.",
                application.id,
            )
            return {}

        role = {
            "ContactId": contact["Id"],
            "OpportunityId": application.sf_id,
            "Role": self.org.broker_role,
        }
        return self.client.post_data("/sobjects/OpportunityContactRole", role)

    def create_owner_role(self, application: Application, owner: Optional[Owner] = None) -> Dict[str, Any]:
        """
        Attach an owner's contact to the opportunity. Without ``owner`` the
        applicant is attached as the primary contact. Roles are never updated.
        """
        if not application.sf_id:
            return {}

        contact_id = owner.sf_id if owner is not None and owner.sf_id else application.applicant.sf_id
        role = {
            "ContactId": contact_id,
            "OpportunityId": application.sf_id,
            "Role": self.org.owner_role,
            "isPrimary": owner is None or owner.id is None,
        }
        return self.client.post_data("/sobjects/OpportunityContactRole", role)

    def upsert_account_party(self, application: Application) -> Response:
        if not application.sf_id or application.company is None:
            logger.warning(
                "Salesforce account party cannot be created for application #%s because there is no opportunity ID.",
                application.id,
            )
            return False

        company = application.company
        payload = self.mapper.account_party(application)
        if company.sf_party_id:
            return self.client.patch_data(f"/sobjects/Party__c/{company.sf_party_id}", payload)

        payload["Opportunity__c"] = application.sf_id
        return self._create("/sobjects/Party__c", payload, company, "sf_party_id")

    def upsert_owner_party(self, application: Application, company_owner: CompanyOwner) -> Response:
        if not application.sf_id:
            logger.warning(
                "Salesforce owner party cannot be created for application #%s because there is no opportunity ID.",
                application.id,
            )
            return False

        payload = self.mapper.owner_party(company_owner)
        if company_owner.sf_party_id:
            return self.client.patch_data(f"/sobjects/Party__c/{company_owner.sf_party_id}", payload)

        payload["Opportunity__c"] = application.sf_id
        return self._create("/sobjects/Party__c", payload, company_owner, "sf_party_id")

    def upsert_usage(self, application: Application) -> Response:
        if not application.sf_id or not application.sf_facility:
            logger.warning(
                "Salesforce usage cannot be created for application #%s because there is either "
                "no opportunity ID or facility ID.",
                application.id,
            )
            return False

        payload = self.mapper.usage(application)
        if application.sf_usage:
            self.client.patch_data(f"/sobjects/Source_Use__c/{short_id(application.sf_usage)}", payload)
            return {"id": application.sf_usage}

        payload["Opportunity__c"] = application.sf_id
        payload["Facility__c"] = application.sf_facility
        return self._create("/sobjects/Source_Use__c/", payload, application, "sf_usage")

    def sync_application(self, application: Application) -> Dict[str, Any]:
        """
        Push a whole application in dependency order: account, contacts,
        opportunity, facility, usage, parties and contact roles.

        Returns which steps produced a non-empty response.
        """
        outcome: Dict[str, Any] = {"account": bool(self.upsert_account(application))}
        outcome["contacts"] = [bool(self.upsert_contact(co, application)) for co in application.owners]
        outcome["opportunity"] = bool(self.upsert_opportunity(application))
        outcome["facility"] = bool(self.upsert_facility(application))
        outcome["usage"] = bool(self.upsert_usage(application))
        outcome["account_party"] = bool(self.upsert_account_party(application))
        outcome["owner_parties"] = [bool(self.upsert_owner_party(application, co)) for co in application.owners]
        outcome["owner_role"] = bool(self.create_owner_role(application))
        return outcome
