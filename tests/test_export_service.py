import io

import pandas as pd
import pytest

from refman.auth.users import register
from refman.errors import ValidationError
from refman.services import article_service
from refman.services.export_service import articles_frame, export_articles

from conftest import article_payload, signup_and_login


def test_articles_frame_joins_list_fields():
    df = articles_frame([{"title": "T", "authors": ["A", "B"], "pages": ["1", "2"], "keywords": [], "doi": "10.1/x"}])
    assert list(df.columns)[:3] == ["title", "authors", "publication_date"]
    row = df.iloc[0]
    assert row["authors"] == "A; B"
    assert row["pages"] == "1; 2"
    assert row["keywords"] == ""


def test_export_rejects_unknown_format():
    user = register("Ada", "Lovelace", "ada", "pw12345")
    with pytest.raises(ValidationError):
        export_articles(user.id, "pdf")


def test_csv_export_contains_only_own_articles(make_client):
    alice, bob = make_client(), make_client()
    signup_and_login(alice, "alice")
    signup_and_login(bob, "bob")
    alice.post("/articles", json=article_payload(title="Mine", doi="10.1/mine"))
    bob.post("/articles", json=article_payload(title="Theirs", doi="10.1/theirs"))

    r = alice.get("/articles/export.csv")
    assert r.status_code == 200
    assert r.headers["content-type"].startswith("text/csv")
    df = pd.read_csv(io.StringIO(r.text))
    assert df["title"].tolist() == ["Mine"]
    assert df["authors"].tolist() == ["Ada Lovelace; Alan Turing"]


def test_xlsx_export_is_readable(client):
    user_id = signup_and_login(client, "ab1")
    article_service.create_article(user_id, article_payload())

    r = client.get("/articles/export.xlsx")
    assert r.status_code == 200
    assert r.headers["content-type"].startswith(
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
    )
    df = pd.read_excel(io.BytesIO(r.content), sheet_name="Articles")
    assert df["doi"].tolist() == ["10.1000/qec.2021"]


def test_export_of_unknown_format_over_http_is_400(client):
    signup_and_login(client, "ab1")
    assert client.get("/articles/export.pdf").status_code == 400
