import logging

import pytest

from crm_bridge.database.records import InMemoryRecordStore
from crm_bridge.integrations.contracts.lending import (
    Application,
    Company,
    CompanyOwner,
    DistributionVariant,
    Lookup,
    Owner,
    ReferralAccount,
)
from crm_bridge.integrations.salesforce.sync import ApplicationSync, short_id
from tests.conftest import DATA_URL, INSTANCE_URL, FakeResponse


def created(sf_id):
    return FakeResponse(201, {"id": sf_id, "success": True, "errors": []})


def page(records):
    return FakeResponse(200, {"totalSize": len(records), "done": True, "records": records})


def make_application(**overrides):
    applicant = Owner(id=10, name="Jane Public", email="jane@example.com")
    fields = dict(
        id=501,
        applicant=applicant,
        companies=[Company(id=20, company_name="Acme Widgets")],
        owners=[CompanyOwner(owner=applicant, ownership=100.0)],
        amount=150000.0,
        stage=Lookup(description="Application"),
        status=Lookup(description="Started"),
        usage=Lookup(description="Buying Equipment"),
    )
    fields.update(overrides)
    return Application(**fields)


@pytest.fixture
def store():
    return InMemoryRecordStore()


@pytest.fixture
def sync(service, store):
    return ApplicationSync(service, store=store)


def test_short_id():
    assert short_id("006U000000AbCdEIAZ") == "006U000000AbCdE"
    assert short_id("006U000000AbCdE") == "006U000000AbCdE"


def test_create_account_writes_back_id_and_owner(sync, http, store):
    app = make_application(distribution_variant=DistributionVariant(sf_owner="005CHANNEL", sf_enabled=True))
    http.queue(created("001NEW"))

    response = sync.upsert_account(app)

    assert response["id"] == "001NEW"
    assert app.company.sf_id == "001NEW"
    assert store.saved == [app.company]
    call = http.calls[0]
    assert (call["method"], call["url"]) == ("POST", f"{DATA_URL}/sobjects/Account")
    assert call["json"]["OwnerId"] == "005CHANNEL"


def test_update_account_patches_without_owner(sync, http, store):
    app = make_application(sf_owner_id="005EXPLICIT")
    app.company.sf_id = "001OLD"
    http.queue(FakeResponse(204))

    response = sync.upsert_account(app)

    assert response["code"] == 204
    assert http.calls[0]["method"] == "PATCH"
    assert http.calls[0]["url"] == f"{DATA_URL}/sobjects/Account/001OLD"
    assert "OwnerId" not in http.calls[0]["json"]
    assert store.saved == []


def test_account_reused_from_applicant_contact(sync, http, store):
    app = make_application()
    app.applicant.sf_id = "003JANE"
    http.queue(page([{"AccountId": "001FOUND"}]), FakeResponse(204))

    sync.upsert_account(app)

    assert "SELECT+AccountId+FROM+Contact" in http.calls[0]["url"]
    assert app.company.sf_id == "001FOUND"
    assert http.calls[1]["url"] == f"{DATA_URL}/sobjects/Account/001FOUND"
    assert store.saved == [app.company]


def test_failed_create_leaves_entity_untouched(sync, http, store, caplog):
    app = make_application()
    http.queue(FakeResponse(400, [{"errorCode": "REQUIRED_FIELD_MISSING"}]))

    with caplog.at_level(logging.ERROR):
        assert sync.upsert_account(app) == {}

    assert app.company.sf_id is None
    assert store.saved == []
    assert "Code: 400" in caplog.text


def test_contact_requires_email(sync, http):
    owner = Owner(name="No Email")
    assert sync.upsert_contact(CompanyOwner(owner=owner), make_application()) is False
    assert http.calls == []


def test_contact_found_by_email_is_patched(sync, http, store):
    app = make_application()
    http.queue(page([{"Id": "003FOUND"}]), FakeResponse(204))

    sync.upsert_contact(app.owners[0], app)

    assert app.applicant.sf_id == "003FOUND"
    assert http.calls[1]["method"] == "PATCH"
    assert http.calls[1]["url"] == f"{DATA_URL}/sobjects/Contact/003FOUND"
    assert store.saved == [app.applicant]


def test_new_contact_is_created(sync, http, store):
    app = make_application()
    http.queue(page([]), created("003NEW"))

    sync.upsert_contact(app.owners[0], app)

    assert app.applicant.sf_id == "003NEW"
    assert http.calls[1]["url"] == f"{DATA_URL}/sobjects/Contact"


def test_lead_create_and_update(sync, http):
    app = make_application()
    http.queue(created("00QNEW"), FakeResponse(204))

    assert sync.upsert_lead(app)["id"] == "00QNEW"
    sync.upsert_lead(app, lead_id="00QNEW")

    assert http.calls[0]["url"] == f"{DATA_URL}/sobjects/Lead/"
    assert (http.calls[1]["method"], http.calls[1]["url"]) == ("PATCH", f"{DATA_URL}/sobjects/Lead/00QNEW")


def test_convert_lead_fills_missing_fields_then_calls_apex(sync, http, config):
    app = make_application()
    http.queue(
        FakeResponse(200, {"Id": "00Q1", "IsConverted": False, "LeadSource": "Referral", "Owner_ID__c": "005X"}),
        FakeResponse(204),
        FakeResponse(200, {"success": True}),
    )

    result = sync.convert_lead("00Q1", app)

    assert result == {"success": True}
    patch = http.calls[1]
    assert patch["method"] == "PATCH"
    assert patch["json"]["Submission_Id__c"] == 501
    assert patch["json"]["Use_of_Proceeds__c"] == "Buying Equipment"
    assert patch["json"]["LeadSource"] == "Referral"
    assert patch["json"]["Owner_ID__c"] == "005X"
    assert http.calls[2]["url"] == f"{INSTANCE_URL}{config.org.lead_converter_endpoint}"
    assert http.calls[2]["json"] == {"leadId": "00Q1"}


def test_convert_lead_skips_converted_and_missing(sync, http):
    app = make_application()
    http.queue(FakeResponse(200, {"Id": "00Q1", "IsConverted": True}), FakeResponse(404))

    assert sync.convert_lead("00Q1", app) is False
    assert sync.convert_lead("00Q2", app) is False
    assert len(http.calls) == 2


def test_attempt_lead_conversion_without_lead(sync, http):
    http.queue(page([]))
    assert sync.attempt_lead_conversion(make_application()) is False
    assert sync.attempt_lead_conversion(make_application(applicant=Owner(name="x"))) is False
    assert len(http.calls) == 1


def test_opportunity_preconditions(sync, http):
    assert sync.upsert_opportunity(make_application()) is False
    assert sync.upsert_opportunity(make_application(applicant=Owner(name="x"))) is False
    assert http.calls == []


def test_opportunity_create_returns_application(sync, http, store):
    app = make_application(account=ReferralAccount(id=7, sf_owner="005BROKER", sf_enabled=True))
    app.company.sf_id = "001ACME"
    http.queue(created("006U000000AbCdEIAZ"))

    result = sync.upsert_opportunity(app)

    assert result is app
    assert app.sf_id == "006U000000AbCdEIAZ"
    assert http.calls[0]["json"]["OwnerId"] == "005BROKER"
    assert store.saved == [app]


def test_opportunity_update_uses_short_id(sync, http):
    app = make_application(sf_id="006U000000AbCdEIAZ")
    app.company.sf_id = "001ACME"
    http.queue(FakeResponse(204))

    sync.upsert_opportunity(app)

    assert http.calls[0]["url"] == f"{DATA_URL}/sobjects/Opportunity/006U000000AbCdE"
    assert "OwnerId" not in http.calls[0]["json"]


def test_opportunity_create_without_id_in_response(sync, http, caplog):
    app = make_application()
    app.company.sf_id = "001ACME"
    http.queue(FakeResponse(500))

    with caplog.at_level(logging.ERROR):
        assert sync.upsert_opportunity(app) is False
    assert "No opportunity ID" in caplog.text


def test_facility_relation_only_on_create(sync, http):
    app = make_application(sf_id="006A")
    http.queue(created("a0FNEW"), FakeResponse(204))

    sync.upsert_facility(app)
    sync.upsert_facility(app)

    assert http.calls[0]["json"]["Opportunity__c"] == "006A"
    assert app.sf_facility == "a0FNEW"
    assert http.calls[1]["url"] == f"{DATA_URL}/sobjects/Facility__c/a0FNEW"
    assert "Opportunity__c" not in http.calls[1]["json"]


def test_facility_needs_opportunity(sync, http):
    assert sync.upsert_facility(make_application()) is False
    assert http.calls == []


def test_status_updates(sync, http):
    app = make_application(sf_id="006U000000AbCdEIAZ", sf_facility="a0FU000000XyZaBIAZ")
    http.queue(FakeResponse(204), FakeResponse(204))

    sync.update_application_status(app, "/apply/review")
    sync.update_facility_status(app)

    assert http.calls[0]["url"] == f"{DATA_URL}/sobjects/Opportunity/006U000000AbCdE"
    assert http.calls[0]["json"]["Application_Last_Page__c"] == "/apply/review"
    assert http.calls[1]["url"] == f"{DATA_URL}/sobjects/Facility__c/a0FU000000XyZaB"
    assert http.calls[1]["json"] == {"Stage__c": "Application", "Status__c": "Started"}
    assert sync.update_application_status(make_application()) is False


def test_usage_create_and_update(sync, http):
    app = make_application(sf_id="006A", sf_facility="a0FA")
    http.queue(created("a0SNEW"), FakeResponse(204))

    sync.upsert_usage(app)
    assert app.sf_usage == "a0SNEW"
    assert http.calls[0]["json"]["Facility__c"] == "a0FA"
    assert http.calls[0]["json"]["Project_Cost__c"] == "Equipment Purchase"

    assert sync.upsert_usage(app) == {"id": "a0SNEW"}
    assert "Facility__c" not in http.calls[1]["json"]


def test_parties(sync, http, config):
    app = make_application(sf_id="006A")
    http.queue(created("a0PBIZ"), created("a0POWN"))

    sync.upsert_account_party(app)
    sync.upsert_owner_party(app, app.owners[0])

    assert app.company.sf_party_id == "a0PBIZ"
    assert app.owners[0].sf_party_id == "a0POWN"
    assert http.calls[0]["json"]["RecordTypeId"] == config.org.business_party_record_type
    assert http.calls[1]["json"]["Party_Role__c"] == "Owner"


def test_broker_role(sync, http, config):
    app = make_application(sf_id="006A", account_id=7, account=ReferralAccount(id=7, sf_account="001BROKER"))
    http.queue(page([{"Id": "003BROKER", "Name": "Bob"}]), created("00KNEW"))

    sync.create_broker_role(app)

    assert "AccountId%3D'001BROKER'" in http.calls[0]["url"]
    assert http.calls[1]["json"] == {"ContactId": "003BROKER", "OpportunityId": "006A", "Role": config.org.broker_role}


def test_broker_role_without_broker(sync, http):
    assert sync.create_broker_role(make_application(sf_id="006A", account_id=1)) == {}
    assert http.calls == []


def test_owner_role_primary_flag(sync, http, config):
    app = make_application(sf_id="006A")
    app.applicant.sf_id = "003JANE"
    partner = Owner(id=11, name="Sam Partner", sf_id="003SAM")
    http.queue(created("00K1"), created("00K2"))

    sync.create_owner_role(app)
    sync.create_owner_role(app, partner)

    assert http.calls[0]["json"] == {
        "ContactId": "003JANE",
        "OpportunityId": "006A",
        "Role": config.org.owner_role,
        "isPrimary": True,
    }
    assert http.calls[1]["json"]["ContactId"] == "003SAM"
    assert http.calls[1]["json"]["isPrimary"] is False


def test_sync_application_runs_every_step(sync, http, store):
    app = make_application()
    http.queue(
        created("001NEW"),       # account
        page([]),                # contact lookup by email
        created("003NEW"),       # contact
        created("006NEW"),       # opportunity
        created("a0FNEW"),       # facility
        created("a0SNEW"),       # usage
        created("a0PBIZ"),       # account party
        created("a0POWN"),       # owner party
        created("00KNEW"),       # owner role
    )

    outcome = sync.sync_application(app)

    assert outcome == {
        "account": True,
        "contacts": [True],
        "opportunity": True,
        "facility": True,
        "usage": True,
        "account_party": True,
        "owner_parties": [True],
        "owner_role": True,
    }
    assert (app.sf_id, app.sf_facility, app.sf_usage) == ("006NEW", "a0FNEW", "a0SNEW")
    assert http.calls[-1]["json"]["ContactId"] == "003NEW"
    assert len(store.saved) == 7
