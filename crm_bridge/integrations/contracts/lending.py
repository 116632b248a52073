"""
Lending-domain entities handed to the Salesforce sync layer.

These mirror the loan-origination records owned by the calling application.
The sync layer reads them and writes back Salesforce ids (sf_id, sf_facility,
sf_party_id, ...) after a successful create; persisting those ids is the job
of the RecordStore passed to ApplicationSync.

Tri-state flags use 1 (yes), 0 (no), 2 (prefer not to disclose) and None
(unanswered). Dates may be date, datetime or ISO strings.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import List, Optional, Union

DateLike = Union[date, datetime, str, None]
Flag = Union[int, str, None]


# ---------------------------------------------------------------------------
# Reference rows
# ---------------------------------------------------------------------------

@dataclass
class Lookup:
    """A name/description row from a lookup table (stage, status, product, ...)."""
    name: Optional[str] = None
    description: Optional[str] = None
    sf_id: Optional[str] = None


@dataclass
class Naics:
    code: Optional[str] = None
    industry: Optional[str] = None


@dataclass
class TaxInfo:
    last_filed: Optional[str] = None
    year_end: Optional[str] = None
    filed_as: Optional[str] = None
    old_address: Flag = None
    old_address1: Optional[str] = None
    old_city: Optional[str] = None
    old_state_abbreviation: Optional[str] = None
    old_zip: Optional[str] = None


@dataclass
class ProductVariant:
    name: Optional[str] = None
    spread: Optional[float] = None
    product: Optional[Lookup] = None
    record_type: Optional[str] = None    # Lead RecordTypeId for this product type


@dataclass
class DistributionVariant:
    """The channel an application arrived through."""
    sf_source: Optional[str] = None
    sf_owner: Optional[str] = None
    sf_enabled: bool = False
    sf_opt_out: Flag = None
    sf_record_type: Optional[str] = None
    campaign_id: Optional[str] = None
    team_ids: List[str] = field(default_factory=list)


@dataclass
class ReferralAccount:
    """The broker/referral partner account that owns an application."""
    id: int = 1
    description: Optional[str] = None
    nova_id: Optional[str] = None
    sf_enabled: bool = False
    sf_account: Optional[str] = None
    sf_owner: Optional[str] = None


# ---------------------------------------------------------------------------
# People and companies
# ---------------------------------------------------------------------------

@dataclass
class Owner:
    id: Optional[int] = None
    name: str = ""
    email: Optional[str] = None
    login_email: Optional[str] = None    # email of the linked user account, if any
    honorific: Optional[str] = None
    suffix: Optional[str] = None
    gender: Optional[str] = None
    birth_date: DateLike = None
    ssn: Optional[str] = None
    address1: Optional[str] = None
    address2: Optional[str] = None
    city: Optional[str] = None
    state_abbreviation: Optional[str] = None
    zip: Optional[str] = None
    phone: Optional[str] = None
    salary: Optional[float] = None
    rating: Optional[Lookup] = None
    own: Flag = None
    monthly_payment: Optional[float] = None
    citizenship: Optional[Lookup] = None
    citizenship_id: Optional[int] = None
    resident: Flag = None
    alien_registration_number: Optional[str] = None
    birth_country: Optional[str] = None
    birth_state: Optional[str] = None
    birth_city: Optional[str] = None
    id_type: Optional[str] = None
    id_number: Optional[str] = None
    id_state: Optional[str] = None
    id_expires: DateLike = None
    veteran: Flag = None
    race: Optional[str] = None
    ethnicity: Optional[str] = None
    # eligibility answers
    indicted: Flag = None
    arrested: Flag = None
    convicted: Flag = None
    previous_fed_loan: Flag = None
    sba_debarred: Flag = None
    legal_delinquency: Flag = None
    has_affiliates: Flag = None
    fed_delinquency: Flag = None
    fed_default: Flag = None
    sba_employee: Flag = None
    fed_employee: Flag = None
    sba_former: Flag = None
    sbac_score: Flag = None
    gs13: Flag = None
    affiliates: List[str] = field(default_factory=list)
    # personal financial statement
    cash_reserves: Optional[float] = None
    securities: Optional[float] = None
    life_insurance: Optional[float] = None
    retirement: Optional[float] = None
    real_estate: Optional[float] = None
    other_assets: Optional[float] = None
    cc_balance: Optional[float] = None
    loan_balance: Optional[float] = None
    mortgage_balance: Optional[float] = None
    other_balance: Optional[float] = None
    # taxes
    tax_year: Optional[str] = None
    tax_name: Optional[str] = None
    tax_ssn: Optional[str] = None
    joint_return: Flag = None
    joint_name: Optional[str] = None
    joint_ssn: Optional[str] = None
    prev_address: Optional[str] = None
    prev_city: Optional[str] = None
    prev_state: Optional[str] = None
    prev_zip: Optional[str] = None
    purchase_date: DateLike = None
    confirmed: DateLike = None
    sf_id: Optional[str] = None


@dataclass
class CompanyOwner:
    """An owner's stake in a company."""
    owner: Owner
    ownership: Optional[float] = None    # percentage
    authorized_signer: Flag = None
    title: Optional[str] = None
    type: Optional[str] = None
    sf_party_id: Optional[str] = None


@dataclass
class Company:
    id: Optional[int] = None
    company_name: str = ""
    dba_name: Optional[str] = None
    phone: Optional[str] = None
    type: Optional[Lookup] = None
    ein_ssn: Optional[str] = None
    established: DateLike = None
    naics: Optional[Naics] = None
    address1: Optional[str] = None
    address2: Optional[str] = None
    city: Optional[str] = None
    state_abbreviation: Optional[str] = None
    state_name: Optional[str] = None
    zip: Optional[str] = None
    home_business: Flag = None
    own: Flag = None
    is_franchise: Flag = None
    franchise: Optional[Lookup] = None
    other_franchise: Optional[str] = None
    years_in_business: Optional[int] = None
    revenue: Optional[float] = None
    employee_count: Optional[int] = None
    website: Flag = None
    url: Optional[str] = None
    resume: Optional[str] = None
    history: Optional[str] = None
    exporter: Flag = None
    offensive: Flag = None
    lender: Flag = None
    non_profit: Flag = None
    taxes: Optional[TaxInfo] = None
    approved: DateLike = None
    approver_name: Optional[str] = None
    sf_id: Optional[str] = None
    sf_party_id: Optional[str] = None


# ---------------------------------------------------------------------------
# Loan application
# ---------------------------------------------------------------------------

@dataclass
class Application:
    id: int
    applicant: Owner
    companies: List[Company] = field(default_factory=list)
    owners: List[CompanyOwner] = field(default_factory=list)
    amount: Optional[float] = None
    term: Optional[int] = None
    rate: Optional[float] = None
    apr: Optional[float] = None
    est_payment: Optional[float] = None
    stage: Optional[Lookup] = None
    status: Optional[Lookup] = None
    product: Optional[Lookup] = None
    product_variant: Optional[ProductVariant] = None
    usage: Optional[Lookup] = None
    customer_type: Optional[Lookup] = None
    distribution_variant: Optional[DistributionVariant] = None
    account: Optional[ReferralAccount] = None
    account_id: Optional[int] = None
    current_endpoint: Optional[str] = None
    furthest_endpoint: Optional[str] = None
    t_and_c1: DateLike = None    # terms accepted at
    t_and_c2: DateLike = None    # terms read at
    approved: DateLike = None
    cra_qualified: Flag = None
    credit_card: Flag = None
    construction_gt10k: Flag = None
    reject_reason: Optional[str] = None
    reject_details: Optional[str] = None
    novatraq_id: Optional[str] = None
    employee_id: Optional[str] = None
    jobs_created: Optional[int] = None
    jobs_retained: Optional[int] = None
    export_amount: Optional[float] = None
    ip_address: Optional[str] = None
    browser_info: Optional[str] = None
    refid: Optional[str] = None
    owners_verified: bool = False
    sf_id: Optional[str] = None          # Opportunity id
    sf_facility: Optional[str] = None
    sf_usage: Optional[str] = None
    sf_owner_id: Optional[str] = None

    @property
    def company(self) -> Optional[Company]:
        """The borrowing company (first on the application)."""
        return self.companies[0] if self.companies else None
