import pytest

from crm_bridge.integrations.salesforce.query import encode_soql, soql_quote
from tests.conftest import DATA_URL, INSTANCE_URL, FakeResponse


@pytest.mark.parametrize(
    "query,expected",
    [
        ("SELECT Id,Name FROM Campaign ORDER BY Name ASC", "SELECT+Id,Name+FROM+Campaign+ORDER+BY+Name+ASC"),
        ("SELECT Id FROM Lead WHERE Email = 'a@b.com'", "SELECT+Id+FROM+Lead+WHERE+Email+%3D+'a%40b.com'"),
        ("SELECT Id FROM User WHERE ProfileId IN('00e1', '00e2')", "SELECT+Id+FROM+User+WHERE+ProfileId+IN%28'00e1',+'00e2'%29"),
    ],
)
def test_encode_soql_keeps_commas_and_quotes(query, expected):
    assert encode_soql(query) == expected


def test_run_query_hits_query_endpoint(service, http):
    http.queue(FakeResponse(200, {"totalSize": 1, "done": True, "records": [{"Id": "701A"}]}))

    page = service.run_query("SELECT Id,Name FROM Campaign")

    assert page["records"] == [{"Id": "701A"}]
    assert http.calls[0]["url"] == f"{DATA_URL}/query/?q=SELECT+Id,Name+FROM+Campaign"


def test_run_query_returns_single_page_only(service, http):
    http.queue(
        FakeResponse(200, {"done": False, "records": [{"Id": "1"}], "nextRecordsUrl": "/services/data/v50.0/query/01g-2000"}),
    )

    page = service.run_query("SELECT Id FROM Account")

    assert page["nextRecordsUrl"] == "/services/data/v50.0/query/01g-2000"
    assert len(http.calls) == 1


def test_query_all_follows_cursors(service, http):
    http.queue(
        FakeResponse(200, {"done": False, "records": [{"Id": "1"}], "nextRecordsUrl": "/services/data/v50.0/query/01g-2000"}),
        FakeResponse(200, {"done": False, "records": [{"Id": "2"}], "nextRecordsUrl": "/services/data/v50.0/query/01g-4000"}),
        FakeResponse(200, {"done": True, "records": [{"Id": "3"}]}),
    )

    records = service.query_all("SELECT Id FROM Account")

    assert [r["Id"] for r in records] == ["1", "2", "3"]
    assert http.calls[1]["url"] == f"{INSTANCE_URL}/services/data/v50.0/query/01g-2000"
    assert http.calls[2]["url"] == f"{INSTANCE_URL}/services/data/v50.0/query/01g-4000"


def test_query_all_keeps_records_when_a_page_fails(service, http):
    http.queue(
        FakeResponse(200, {"done": False, "records": [{"Id": "1"}], "nextRecordsUrl": "/services/data/v50.0/query/01g-2000"}),
        FakeResponse(500, [{"errorCode": "UNKNOWN"}]),
    )

    assert service.query_all("SELECT Id FROM Account") == [{"Id": "1"}]


def test_failed_query_is_empty(service, http):
    http.queue(FakeResponse(400, [{"errorCode": "MALFORMED_QUERY"}]))
    assert service.run_query("SELECT FROM") == {}


def test_first_record_and_email_lookup(service, http):
    http.queue(
        FakeResponse(200, {"totalSize": 1, "records": [{"Id": "001A"}]}),
        FakeResponse(200, {"totalSize": 0, "records": []}),
    )

    assert service.find_id_by_email("Account", "o'neil@example.com") == "001A"
    assert "Email+%3D+'o%5C'neil%40example.com'" in http.calls[0]["url"]
    assert service.find_id_by_email("Account", "nobody@example.com") is None


@pytest.mark.parametrize(
    "value,expected",
    [
        ("006A", "'006A'"),
        ("O'Brien", "'O\\'Brien'"),
        ("back\\slash", "'back\\\\slash'"),
        (42, "'42'"),
    ],
)
def test_soql_quote(value, expected):
    assert soql_quote(value) == expected
