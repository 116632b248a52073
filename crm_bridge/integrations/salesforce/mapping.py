"""
Field mapping from lending-domain entities to Salesforce sObject payloads.

Every mapper returns a fresh flat dict of Salesforce field name -> scalar.
Relation fields that Salesforce refuses to update (Opportunity__c,
Facility__c, OwnerId) are added by the sync layer on create only.

The field names belong to one Salesforce org's schema; org specific ids come
from OrgConfig.
"""

from __future__ import annotations

import calendar
import logging
import re
from datetime import date, datetime, timezone
from typing import Any, Callable, Dict, Optional

from crm_bridge.integrations.contracts.lending import (
    Application,
    Company,
    CompanyOwner,
    DateLike,
    Lookup,
    Owner,
)
from crm_bridge.utils.config_loader import OrgConfig, SalesforceConfig

logger = logging.getLogger(__name__)

Payload = Dict[str, Any]


# ── Value helpers ─────────────────────────────────────────────────────────


def parse_boolean(value: Any) -> Optional[str]:
    """Tri-state flag -> Yes/No/Prefer Not to Disclose picklist value."""
    if isinstance(value, bool):
        return None
    if value in (1, "1"):
        return "Yes"
    if value in (0, "0"):
        return "No"
    if value in (2, "2"):
        return "Prefer Not to Disclose"
    return None


def parse_not_boolean(value: Any) -> Optional[str]:
    """Inverted flag: 1 -> No, 0 -> Yes."""
    if isinstance(value, bool):
        return None
    if value in (1, "1"):
        return "No"
    if value in (0, "0"):
        return "Yes"
    return None


def _to_datetime(value: DateLike) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    try:
        return datetime.fromisoformat(str(value).strip())
    except ValueError:
        logger.warning("Unparseable date value %r; sending null", value)
        return None


def format_date(value: DateLike) -> Optional[str]:
    """Calendar date (YYYY-MM-DD) or None."""
    dt = _to_datetime(value)
    if dt is None:
        return None
    return dt.date().isoformat()


def format_datetime(value: DateLike, hour: int = 7) -> Optional[str]:
    """
    ISO-8601 datetime with the hour forced to ``hour``.

    Salesforce shifts date-times by the org's timezone offset when it renders
    them as dates; pinning the hour keeps the calendar day stable. Naive
    values are taken as UTC.
    """
    dt = _to_datetime(value)
    if dt is None:
        return None
    dt = dt.replace(hour=hour)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.isoformat(timespec="seconds")


def format_timestamp(value: DateLike) -> Optional[str]:
    """ISO-8601 datetime without any hour adjustment."""
    dt = _to_datetime(value)
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.isoformat(timespec="seconds")


def add_months(day: date, months: int) -> date:
    month_index = day.month - 1 + months
    year = day.year + month_index // 12
    month = month_index % 12 + 1
    last_day = calendar.monthrange(year, month)[1]
    return day.replace(year=year, month=month, day=min(day.day, last_day))


def split_name(name: Optional[str]) -> tuple:
    """'Jane Q Public' -> ('Jane', 'Q Public'). A single word is the last name."""
    first, _, last = (name or "").strip().partition(" ")
    if not last:
        return "", first
    return first, last


def clean_amount(value: Any) -> Any:
    """Strip thousands separators from amounts typed into the application."""
    if isinstance(value, str):
        return value.replace(",", "")
    return value


def own_or_rent(value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    return "Own" if value in (1, "1") else "Rent"


def join_address(line1: Optional[str], line2: Optional[str]) -> str:
    line1 = line1 or ""
    return f"{line1}, {line2}" if line2 else line1


def snake_case_field(name: str) -> str:
    """Custom field API name -> snake_case key ('Organization_Type__c' -> 'organization_type')."""
    stripped = name.replace("__c", "").replace("__pc", "").replace("_", "")
    return re.sub(r"(.)(?=[A-Z])", r"\1_", stripped).lower()


def account_org_type(company_type: Optional[Lookup]) -> Optional[str]:
    if company_type is None or not company_type.name:
        return None
    if company_type.name == "llc":
        return "LLC"
    if company_type.name == "scorp":
        return "S-Corp"
    return company_type.description


def party_org_type(company_type: Optional[Lookup]) -> Optional[str]:
    if company_type is None or not company_type.name:
        return None
    return {
        "llc": "LLC",
        "scorp": "S-Corp",
        "partnership": "Partnership - General",
        "soleprop": company_type.description,
    }.get(company_type.name, "Other")


SF_USAGE_NAMES = {
    "Purchasing Real Estate": "Real Estate - Existing",
    "Refinancing Debt": "Debt Refi - SBA Loan",
    "Buying Equipment": "Equipment Purchase",
    "Leasing Equipment": "Equipment Lease",
    "Building a Home": "Real Estate - Ground Up Construction",
    "Home Remodel": "Real Estate - Existing",
    "Purchasing Land/Lot": "Land",
    "Pre-sold Construction": "Real Estate - Ground Up Construction",
    "Speculative Construction": "Real Estate - Ground Up Construction",
}


def sf_usage_name(name: Optional[str]) -> Optional[str]:
    """Use-of-proceeds label -> Source_Use__c project cost picklist value."""
    return SF_USAGE_NAMES.get(name, name)


def resolve_owner_id(application: Application) -> Optional[str]:
    """
    Salesforce user that should own new records for this application.

    Explicit owner first, then the distribution channel, then the referral
    account. None leaves Salesforce to assign its default sync user.
    """
    if application.sf_owner_id:
        return application.sf_owner_id
    variant = application.distribution_variant
    if variant is not None and variant.sf_owner and variant.sf_enabled:
        return variant.sf_owner
    account = application.account
    if account is not None and account.sf_owner and account.sf_enabled:
        return account.sf_owner
    return None


def _desc(lookup: Optional[Lookup]) -> Optional[str]:
    return lookup.description if lookup is not None else None


def _name(lookup: Optional[Lookup]) -> Optional[str]:
    return lookup.name if lookup is not None else None


def _product(application: Application) -> Optional[Lookup]:
    variant = application.product_variant
    return variant.product if variant is not None else None


def _source(application: Application) -> Optional[str]:
    variant = application.distribution_variant
    return variant.sf_source if variant is not None else None


# Contact eligibility picklists: Salesforce field -> Owner attribute
CONTACT_ELIGIBILITY_FIELDS = {
    "Veteran__c": "veteran",
    "Permanent_Resident_Alien__c": "resident",
    "Eligibility_Indictment__c": "indicted",
    "Eligibility_Arrested_Past_Six_Months__c": "arrested",
    "Eligibility_Criminal_Charges__c": "convicted",
    "Eligibility_Applied_SBA__c": "previous_fed_loan",
    "Eligibility_Debarred__c": "sba_debarred",
    "Eligibility_Sixty_Days_Deliquent__c": "legal_delinquency",
    "Eligibility_Affiliate_Businesses__c": "has_affiliates",
    "Eligibility_Affiliate_Deliquent__c": "fed_delinquency",
    "Eligibility_Affiliate_Default__c": "fed_default",
    "Eligibility_SBA_Employee__c": "sba_employee",
    "Eligibility_Congress_or_Fed__c": "fed_employee",
    "Eligibility_SBA_Separated__c": "sba_former",
    "Eligibility_SCORE__c": "sbac_score",
    "Eligibility_GS13__c": "gs13",
    "Was_it_a_Joint_Return__c": "joint_return",
}

ASSET_FIELDS = ("cash_reserves", "securities", "life_insurance", "retirement", "real_estate", "other_assets")
LIABILITY_FIELDS = ("cc_balance", "loan_balance", "mortgage_balance", "other_balance")


# ── Entity mappers ────────────────────────────────────────────────────────


class FieldMapper:
    """Builds Salesforce payloads for one org's schema."""

    def __init__(self, config: SalesforceConfig, today: Callable[[], date] = date.today) -> None:
        self.org: OrgConfig = config.org
        self.hour = config.datetime_hour
        self.prime_rate = config.prime_rate
        self._today = today

    def _datetime(self, value: DateLike) -> Optional[str]:
        return format_datetime(value, hour=self.hour)

    def _close_date(self) -> str:
        return add_months(self._today(), 2).isoformat()

    def account(self, application: Application) -> Payload:
        company: Company = application.company
        taxes = company.taxes
        naics = company.naics
        payload: Payload = {
            "RecordTypeId": self.org.account_record_type,
            "Name": company.company_name,
            "AccountSource": _source(application),
            "DBA__c": company.dba_name,
            "Phone": company.phone,
            "Organization_Type__c": account_org_type(company.type),
            "TIN_FEIN__c": company.ein_ssn,
            "Business_Start_Date__c": self._datetime(company.established),
            "NaicsCode": naics.code if naics else None,
            "NaicsDesc": naics.industry if naics else None,
            "BillingStreet": join_address(company.address1, company.address2),
            "BillingCity": company.city,
            "BillingStateCode": company.state_abbreviation,
            "BillingPostalCode": company.zip,
            "Is_Home_Business__c": parse_boolean(company.home_business),
            "Rent_or_Own_Business__c": own_or_rent(company.own),
            "Is_Franchise__c": parse_boolean(company.is_franchise),
            "Other_Franchise_Name__c": company.other_franchise,
            "Years_in_Business__c": company.years_in_business,
            "AnnualRevenue": company.revenue,
            "NumberOfEmployees": company.employee_count,
            "Have_Website__c": parse_boolean(company.website),
            "Website": company.url,
            "Management_Resume__c": company.resume,
            "Business_History__c": company.history,
            "Export_Business_Products__c": parse_boolean(company.exporter),
            "Revenue_for_Gambiling_or_Sexual__c": parse_boolean(company.offensive),
            "Is_Lending__c": parse_boolean(company.lender),
            "Not_for_Profit__c": parse_boolean(company.non_profit),
            "Most_Recent_Tax_Filing_Year__c": taxes.last_filed if taxes else None,
            "Fiscal_Year_End__c": taxes.year_end if taxes else None,
            "Company_Listed_on_Tax_Return__c": taxes.filed_as if taxes else None,
            "Is_Current_Tax_Address__c": parse_not_boolean(taxes.old_address) if taxes else None,
            "Online_App_Business_Confirmation_Date__c": self._datetime(company.approved),
            "Online_App_Business_Confirmation_User__c": company.approver_name,
        }
        if taxes is not None and taxes.old_address in (1, "1"):
            payload["Previous_Tax_Address__c"] = taxes.old_address1
            payload["Previous_Tax_City__c"] = taxes.old_city
            payload["Previous_Tax_State__c"] = taxes.old_state_abbreviation
            payload["Previous_Tax_Zip__c"] = taxes.old_zip
        return payload

    def contact(self, company_owner: CompanyOwner, application: Application) -> Payload:
        owner: Owner = company_owner.owner
        company = application.company
        first_name, last_name = split_name(owner.name)
        payload: Payload = {
            "AccountId": company.sf_id if company else None,
            "LeadSource": _source(application),
            "Salutation": owner.honorific,
            "FirstName": first_name,
            "LastName": last_name,
            "Suffix__c": owner.suffix,
            "Gender__c": owner.gender or None,
            "Birthdate": self._datetime(owner.birth_date),
            "SSN__c": owner.ssn or None,
            "MailingStreet": join_address(owner.address1, owner.address2),
            "MailingCity": owner.city,
            "MailingStateCode": owner.state_abbreviation,
            "MailingPostalCode": owner.zip,
            "Phone": owner.phone,
            "Email": owner.login_email or owner.email,
            "Salary__c": owner.salary,
            "Company_Name__c": company.company_name if company else None,
            "Estimated_Credit_Score__c": _desc(owner.rating),
            "Ownership_Percentage__c": (
                f"{company_owner.ownership:,.0f}" if company_owner.ownership is not None else None
            ),
            "Is_Authorized_Signer__c": parse_boolean(company_owner.authorized_signer),
            "Contact_Type__c": "Business Owner",
            "Title": company_owner.title or company_owner.type,
            "Own_or_Rent__c": own_or_rent(owner.own),
            "Monthly_Home_Payment__c": round(owner.monthly_payment) if owner.monthly_payment else None,
            "Citizenship__c": _name(owner.citizenship),
            "Alien_Registration_Number__c": owner.alien_registration_number,
            "Country_of_Birth__c": owner.birth_country,
            "State_of_Birth__c": owner.birth_state,
            "City_of_Birth__c": (owner.birth_city or "")[:99] or None,
            "Photo_Identification__c": owner.id_type,
            "Photo_ID_Number__c": owner.id_number,
            "Identification_State_Issued__c": owner.id_state,
            "Identification_Expiration_Date__c": self._datetime(owner.id_expires),
            "Race__c": owner.race,
            "Ethnicity__c": owner.ethnicity,
            "Cash_in_Bank__c": owner.cash_reserves,
            "Marketable_Securities__c": owner.securities,
            "Value_of_Life_Insurance__c": owner.life_insurance,
            "Retirement_Accounts__c": owner.retirement,
            "Real_Estate_Owned__c": owner.real_estate,
            "Other_Assets__c": owner.other_assets,
            "Credit_Cards__c": owner.cc_balance,
            "Installement_Loans__c": owner.loan_balance,
            "Mortgages__c": owner.mortgage_balance,
            "Other_Liabilities__c": owner.other_balance,
            "Most_Recent_Tax_Year_Filed__c": owner.tax_year,
            "Primary_Filer_Name__c": owner.tax_name,
            "Primary_Filer_SSN__c": owner.tax_ssn,
            "Second_Filer_Name__c": owner.joint_name,
            "Second_Filer_SSN__c": owner.joint_ssn,
            "Different_Tax_Address__c": "Yes" if owner.prev_address else "No",
            "Previous_Tax_Address__c": owner.prev_address,
            "Previous_Tax_City__c": owner.prev_city,
            "Previous_Tax_State__c": owner.prev_state,
            "Previous_Tax_Zip__c": owner.prev_zip,
            "Application_Date_Confirmed__c": self._datetime(owner.confirmed),
            "Application_Confirmed_User__c": owner.name if owner.confirmed else None,
        }
        for field_name, attr in CONTACT_ELIGIBILITY_FIELDS.items():
            payload[field_name] = parse_boolean(getattr(owner, attr))

        if application.distribution_variant is not None:
            payload["HasOptedOutOfEmail"] = application.distribution_variant.sf_opt_out in (1, "1")

        if parse_boolean(owner.has_affiliates) == "Yes" and owner.affiliates:
            payload["Affiliate_Names__c"] = ", ".join(owner.affiliates)

        if owner.cash_reserves:
            assets = sum(int(getattr(owner, attr) or 0) for attr in ASSET_FIELDS)
            liabilities = sum(int(getattr(owner, attr) or 0) for attr in LIABILITY_FIELDS)
            payload["Total_Assets__c"] = assets
            payload["Total_Liabilities__c"] = liabilities
            payload["Net_Worth__c"] = assets - liabilities
        return payload

    def lead(self, application: Application) -> Payload:
        applicant = application.applicant
        company = application.company or Company()
        account = application.account
        product = _product(application)
        variant = application.product_variant
        first_name, last_name = split_name(applicant.name)
        referred = (application.account_id or 0) > 1
        return {
            "Estimated_Loan_Amount__c": clean_amount(application.amount),
            "Description": variant.name if variant else None,
            "RecordTypeId": variant.record_type if variant else None,
            "Status": "Open",
            "Estimated_Monthly_Payment__c": clean_amount(application.est_payment),
            "Estimated_Rate__c": application.rate,
            "Term_years__c": application.term,
            "Is_Debt_Refinance_Credit_Card__c": parse_boolean(application.credit_card),
            "Terms_and_Conditions_Acceptance__c": "Yes" if application.t_and_c1 else None,
            "Terms_and_Conditions_Date__c": format_timestamp(application.t_and_c1),
            "Application_Last_Page__c": application.current_endpoint,
            "Submission_Id__c": application.id,
            "Use_of_Proceeds__c": _desc(application.usage) or "Working Capital",
            "Type__c": _desc(product),
            "LeadSource": "Referral" if referred else "Web (Organic)",
            "Is_There_a_Referral_Source__c": "Yes" if referred else "No",
            "Dealer_Name__c": account.description if account else None,
            "Dealer_Code__c": account.nova_id if account else None,
            "FirstName": first_name,
            "LastName": last_name,
            "Salutation": applicant.honorific,
            "Phone": applicant.phone,
            "Email": applicant.email,
            "Rating": _name(applicant.rating),
            "Estimated_Credit_Score__c": _name(applicant.rating),
            "Eligibility_Arrested_Past_Six_Months__c": parse_boolean(applicant.arrested),
            "Eligibility_Indictment_Parole_Probation__c": parse_boolean(applicant.indicted),
            "Eligibility_Criminal_Offense__c": parse_boolean(applicant.convicted),
            "Eligibility_Defaulted_Government_Loan__c": parse_boolean(applicant.fed_default),
            "Eligibility_US_Citizen__c": "Yes" if applicant.citizenship_id == 4 else "No",
            "Company": company.company_name,
            "DBA_Name__c": company.dba_name,
            "Street": company.address1 or "Unknown",
            "City": company.city or "Unknown",
            "State": company.state_name or "UT",
            "PostalCode": company.zip or "84606",
            "Country": "United States",
            "Company_Phone__c": company.phone,
            "Have_Website__c": parse_boolean(company.website) or "No",
            "Website": company.url,
            "AnnualRevenue": clean_amount(company.revenue),
            "NumberOfEmployees": company.employee_count,
            "Years_in_Business__c": company.years_in_business,
            "Company_Start_Date__c": format_timestamp(company.established),
            "Entity_Type__c": company.type.sf_id if company.type else None,
            "TIN_FEIN__c": company.ein_ssn,
            "Is_Franchise__c": parse_boolean(company.is_franchise),
            "Franchise_Name__c": _desc(company.franchise) or None,
            "Eligibility_Is_Lending__c": parse_boolean(company.lender),
            "Eligibility_Not_For_Profit__c": parse_boolean(company.non_profit),
            "Eligibility_Sexual_or_Gambling__c": parse_boolean(company.offensive),
        }

    def lead_conversion_fields(self, lead: Dict[str, Any], application: Application) -> Payload:
        """Fields a lead must carry before the LeadConverter Apex action accepts it."""
        product = _product(application)
        return {
            "Use_of_Proceeds__c": _desc(application.usage) or "Working Capital",
            "Submission_Id__c": application.id,
            "Estimated_Loan_Amount__c": application.amount,
            "Type__c": _desc(product) or "Celtic Express",
            "LeadSource": lead.get("LeadSource") or _source(application) or "Web (Organic)",
            # re-sent so conversion does not reassign the lead to the API user
            "Owner_ID__c": lead.get("Owner_ID__c"),
        }

    def opportunity(self, application: Application) -> Payload:
        company = application.company
        variant = application.distribution_variant
        product = _product(application)
        teams = variant.team_ids if variant is not None else []
        payload: Payload = {
            "AccountId": company.sf_id,
            "Who_Are_You__c": _desc(application.customer_type),
            "Amount": application.amount,
            "RecordTypeId": (variant.sf_record_type if variant else None) or self.org.opportunity_record_type,
            "Name": company.company_name,
            "Type": _desc(product),
            "Application_Last_Page__c": application.current_endpoint,
            "StageName": _desc(application.stage),
            "Status__c": _desc(application.status),
            "CloseDate": self._close_date(),
            "Read_Terms_and_Conditions__c": "Yes" if application.t_and_c2 else None,
            "Terms_and_Conditions_Date__c": self._datetime(application.t_and_c1),
            "Terms_and_Conditions_Acceptance__c": "Yes" if application.t_and_c1 else None,
            "Application_Confirmed_User__c": application.applicant.name if application.t_and_c1 else None,
            "Finished_Application__c": 1 if application.approved else 0,
            "CRA_Eligible__c": parse_boolean(application.cra_qualified),
            "Is_Debt_Refinance_Credit_Card__c": parse_boolean(application.credit_card),
            "Submission_Id__c": application.id,
            "Closed_Lost_Reason__c": application.reject_reason or None,
            "Closed_Lost_Detail__c": application.reject_details or None,
            "LeadSource": _source(application),
            "Opportunity_Teams__c": ";".join(teams) if teams else self.org.default_opportunity_team,
            "Novatraq_Tracking_Number__c": application.novatraq_id or None,
            "Employee_Id__c": application.employee_id,
            "All_Owners_Verified__c": application.owners_verified,
            "Number_of_Jobs_Created__c": application.jobs_created,
            "Number_of_Jobs_Retained__c": application.jobs_retained,
            "Estimated_Total_Export_Sales__c": application.export_amount,
            "More_Than_10K_for_Construction__c": parse_boolean(application.construction_gt10k),
            "IP_Address__c": application.ip_address or "",
            "UA_Browser_Info__c": application.browser_info or "",
            "Refid__c": application.refid,
            "Is_There_a_Referral_Source__c": "No",
        }
        if variant is not None and variant.campaign_id:
            payload["CampaignId"] = variant.campaign_id

        account = application.account
        if application.account_id is not None and account is not None:
            if account.sf_enabled and account.sf_account:
                payload["Is_There_a_Referral_Source__c"] = "Yes"
                payload["Referral_Partner__c"] = account.sf_account

        if application.t_and_c2:
            payload["Finished_Application__c"] = True

        if application.reject_reason:
            payload["Closed_Lost_Reason__c"] = application.reject_reason
            payload["Closed_Lost_Detail__c"] = application.reject_details
        return payload

    def facility(self, application: Application) -> Payload:
        variant = application.product_variant
        payload: Payload = {
            "Total_Pipeline_Amount__c": application.amount,
            "Term_years__c": application.term,
            "Base_Rate__c": self.prime_rate,
            "Rate_Spread__c": variant.spread if variant else None,
            "APR__c": application.apr,
            "Status__c": _desc(application.status),
            "Stage__c": _desc(application.stage),
            "Payment_Frequency__c": "Monthly",
            "Estimated_Close_Date__c": self._close_date(),
            "Bank_Paid_Referral_Fee_Percent__c": 0.0,
            "Packaging_Fee__c": 0.0,
        }
        product = application.product
        if product is not None and product.name:
            payload["Loan_Type__c"] = product.description
            if product.name == "sba_7a":
                payload["Loan_Type__c"] = "SBA >$350K"
            if product.name in ("commercial_construction", "residential_construction"):
                payload["Loan_Type__c"] = "Conventional"
        return payload

    def account_party(self, application: Application) -> Payload:
        company = application.company
        naics = company.naics
        return {
            "RecordTypeId": self.org.business_party_record_type,
            "Party_Role__c": "Borrower",
            "Company_Name__c": company.company_name,
            "DBA_Name__c": company.dba_name,
            "Address_Line_1__c": company.address1,
            "Address_Line_2__c": company.address2,
            "City__c": company.city,
            "State__c": company.state_abbreviation,
            "Zipcode__c": company.zip,
            "Is_Franchise__c": parse_boolean(company.is_franchise),
            "Franchise_Other_Name__c": company.other_franchise,
            "Date_Established_Company__c": format_date(company.established),
            "Tax_Payer_Id__c": company.ein_ssn,
            "NAICS__c": naics.code if naics else None,
            "Nature_of_Business__c": naics.industry if naics else None,
            "Organization_Type__c": party_org_type(company.type),
        }

    def owner_party(self, company_owner: CompanyOwner) -> Payload:
        owner = company_owner.owner
        first_name, last_name = split_name(owner.name)
        gender = owner.gender
        if not gender or gender == "Prefer Not to Disclose":
            gender = None
        return {
            "RecordTypeId": self.org.individual_party_record_type,
            "Party_Role__c": "Owner",
            "First_Name__c": first_name,
            "Last_Name__c": last_name,
            "Gender__c": gender,
            "Primary_Phone__c": owner.phone,
            "Address_Line_1__c": owner.address1,
            "Address_Line_2__c": owner.address2,
            "City__c": owner.city,
            "State__c": owner.state_abbreviation,
            "Zipcode__c": owner.zip,
            "Tax_Payer_Id__c": owner.ssn,
            "Date_of_Birth__c": format_date(owner.birth_date),
            "Date_Became_Owner__c": format_date(owner.purchase_date),
            "Own_or_Rent__c": own_or_rent(owner.own),
            "Amount_Monthly_Mortgage_Rent__c": owner.monthly_payment,
            "Ownership_Percentage__c": round(company_owner.ownership) if company_owner.ownership else None,
        }

    def usage(self, application: Application) -> Payload:
        return {
            "Project_Cost__c": sf_usage_name(_desc(application.usage)),
            "Amount__c": application.amount,
        }

    def status(self, application: Application, last_page: Optional[str] = None, *, facility: bool = False) -> Payload:
        """Stage/status fields pushed whenever an application moves."""
        payload: Payload = {
            "Stage__c" if facility else "StageName": _desc(application.stage),
            "Status__c": _desc(application.status),
        }
        if not facility:
            payload["Application_Last_Page__c"] = last_page
            payload["Application_Furthest_Page__c"] = application.furthest_endpoint
        return payload
