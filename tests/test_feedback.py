import csv
import io
from decimal import Decimal

import pytest

from common.models import NotificationEvent, NotificationLog
from common.notifications import FEEDBACK_REPLY_TEMPLATE, feedback_reply_params
from feedback.exports import FEEDBACK_EXPORT_HEADERS
from feedback.models import Feedback, FeedbackStatus

pytestmark = pytest.mark.django_db


def make_feedback(**overrides):
    data = {
        "guest_name": "Mary Wanjiru",
        "email": "mary@example.com",
        "property": "limuru",
        "rating": Decimal("4.5"),
        "comment": "Lovely gardens and quiet rooms.",
    }
    data.update(overrides)
    return Feedback.objects.create(**data)


# ---------- public ----------

def test_public_submit_lands_as_pending(api_client):
    resp = api_client.post(
        "/api/feedback/public/",
        {"guest_name": "John Kamau", "email": "john@example.com", "property": "kisumu", "rating": 4, "comment": "Great food"},
        format="json",
    )
    assert resp.status_code == 201, resp.json()
    assert resp.json()["status"] == "pending"

    fb = Feedback.objects.get()
    assert (fb.property, fb.rating, fb.status) == ("kisumu", Decimal("4.0"), FeedbackStatus.PENDING)


def test_public_submit_defaults_rating_and_validates(api_client):
    resp = api_client.post(
        "/api/feedback/public/",
        {"guest_name": "John", "property": "limuru", "comment": "Nice"},
        format="json",
    )
    assert resp.status_code == 201
    assert Feedback.objects.get().rating == Decimal("5.0")

    resp = api_client.post(
        "/api/feedback/public/",
        {"guest_name": "", "property": "mombasa", "rating": 7, "comment": ""},
        format="json",
    )
    assert resp.status_code == 400
    assert {"guest_name", "property", "rating", "comment"} <= set(resp.json())


def test_published_list_is_public(api_client):
    make_feedback(guest_name="Shown", status=FeedbackStatus.PUBLISHED)
    make_feedback(guest_name="Hidden")
    make_feedback(guest_name="Other property", property="kanamai", status=FeedbackStatus.PUBLISHED)

    body = api_client.get("/api/feedback/published/?property=limuru").json()
    assert [f["guest_name"] for f in body] == ["Shown"]
    assert "email" not in body[0]


# ---------- staff ----------

def test_list_requires_auth(api_client):
    assert api_client.get("/api/feedback/").status_code == 401


def test_manager_is_scoped_to_own_property(manager_client):
    make_feedback(guest_name="Limuru guest")
    other = make_feedback(guest_name="Kisumu guest", property="kisumu")

    body = manager_client.get("/api/feedback/").json()
    assert [f["guest_name"] for f in body] == ["Limuru guest"]
    assert manager_client.get(f"/api/feedback/{other.pk}/").status_code == 404


def test_filters(gm_client):
    make_feedback(guest_name="Four and a half", rating=Decimal("4.5"))
    make_feedback(guest_name="Four", rating=Decimal("4.0"), status=FeedbackStatus.PUBLISHED)
    make_feedback(guest_name="Three", rating=Decimal("3.0"), property="kanamai", comment="Slow check-in")

    def names(query):
        return sorted(f["guest_name"] for f in gm_client.get(f"/api/feedback/{query}").json())

    assert names("?rating=4") == ["Four", "Four and a half"]
    assert names("?status=published") == ["Four"]
    assert names("?property=kanamai") == ["Three"]
    assert names("?search=slow") == ["Three"]
    assert gm_client.get("/api/feedback/?rating=high").status_code == 400


def test_publish_stamps_publisher(gm_client, general_manager):
    fb = make_feedback()
    resp = gm_client.post(f"/api/feedback/{fb.pk}/status/", {"status": "published"}, format="json")
    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "published"
    assert body["published_by_email"] == "gm@jumuiaresorts.com"

    fb.refresh_from_db()
    assert fb.published_by == general_manager
    assert fb.published_at is not None

    resp = gm_client.post(f"/api/feedback/{fb.pk}/status/", {"status": "archived"}, format="json")
    fb.refresh_from_db()
    assert fb.status == FeedbackStatus.ARCHIVED
    assert fb.published_by == general_manager


def test_unknown_status_is_rejected(gm_client):
    fb = make_feedback()
    assert gm_client.post(f"/api/feedback/{fb.pk}/status/", {"status": "hidden"}, format="json").status_code == 400


def test_reply_emails_guest_after_commit(gm_client, general_manager, emailjs_calls, django_capture_on_commit_callbacks):
    fb = make_feedback()
    with django_capture_on_commit_callbacks(execute=True):
        resp = gm_client.post(f"/api/feedback/{fb.pk}/reply/", {"reply": "Thank you, come again!"}, format="json")

    assert resp.status_code == 200
    fb.refresh_from_db()
    assert fb.replied is True
    assert fb.reply == "Thank you, come again!"
    assert fb.replied_by == general_manager
    assert fb.replied_at is not None

    body = emailjs_calls[0]["json"]
    assert body["template_id"] == FEEDBACK_REPLY_TEMPLATE
    assert body["template_params"]["to_email"] == "mary@example.com"
    assert body["template_params"]["reply"] == "Thank you, come again!"

    log = NotificationLog.objects.get()
    assert (log.event, log.booking) == (NotificationEvent.FEEDBACK_REPLY, None)


def test_reply_without_guest_email_sends_nothing(gm_client, emailjs_calls, django_capture_on_commit_callbacks):
    fb = make_feedback(email="")
    with django_capture_on_commit_callbacks(execute=True) as callbacks:
        resp = gm_client.post(f"/api/feedback/{fb.pk}/reply/", {"reply": "Thanks"}, format="json")

    assert resp.status_code == 200
    assert callbacks == []
    assert emailjs_calls == []


def test_reply_params():
    fb = make_feedback(property="kanamai", reply="See you soon")
    params = feedback_reply_params(fb)
    assert params["resort_name"] == "Jumuia Conference & Beach Resort - Kanamai"
    assert params["rating"] == "4.5"
    assert params["reply"] == "See you soon"


def test_bulk_actions_stay_in_scope(manager_client, limuru_manager):
    a = make_feedback(guest_name="A")
    b = make_feedback(guest_name="B")
    outside = make_feedback(guest_name="C", property="kisumu")
    ids = [a.pk, b.pk, outside.pk]

    resp = manager_client.post("/api/feedback/bulk/", {"ids": ids, "action": "publish"}, format="json")
    assert resp.json() == {"action": "publish", "count": 2}
    a.refresh_from_db()
    outside.refresh_from_db()
    assert a.status == FeedbackStatus.PUBLISHED
    assert a.published_by == limuru_manager
    assert outside.status == FeedbackStatus.PENDING

    resp = manager_client.post("/api/feedback/bulk/", {"ids": [a.pk], "action": "archive"}, format="json")
    assert resp.json()["count"] == 1
    a.refresh_from_db()
    assert a.status == FeedbackStatus.ARCHIVED

    resp = manager_client.post("/api/feedback/bulk/", {"ids": ids, "action": "delete"}, format="json")
    assert resp.json() == {"action": "delete", "count": 2}
    assert list(Feedback.objects.values_list("guest_name", flat=True)) == ["C"]


def test_bulk_rejects_unknown_action(gm_client):
    fb = make_feedback()
    resp = gm_client.post("/api/feedback/bulk/", {"ids": [fb.pk], "action": "hide"}, format="json")
    assert resp.status_code == 400


def test_delete(gm_client):
    fb = make_feedback()
    assert gm_client.delete(f"/api/feedback/{fb.pk}/").status_code == 204
    assert not Feedback.objects.exists()


def test_stats_average_over_published_only(gm_client):
    make_feedback(rating=Decimal("5.0"), status=FeedbackStatus.PUBLISHED)
    make_feedback(rating=Decimal("4.0"), status=FeedbackStatus.PUBLISHED)
    make_feedback(rating=Decimal("1.0"))
    make_feedback(rating=Decimal("2.0"), status=FeedbackStatus.ARCHIVED)

    body = gm_client.get("/api/feedback/stats/").json()
    assert (body["total"], body["pending"], body["published"], body["archived"]) == (4, 1, 2, 1)
    assert Decimal(str(body["average_rating"])) == Decimal("4.5")
    assert body["today"] == 4


def test_stats_with_nothing_published(gm_client):
    make_feedback()
    assert Decimal(str(gm_client.get("/api/feedback/stats/").json()["average_rating"])) == Decimal("0")


def test_csv_export(gm_client):
    make_feedback(comment='Said "wow", twice')
    resp = gm_client.get("/api/feedback/export/")
    assert resp.status_code == 200
    assert resp["Content-Disposition"].startswith('attachment; filename="jumuia_feedback_')

    rows = list(csv.reader(io.StringIO(resp.content.decode())))
    assert rows[0] == FEEDBACK_EXPORT_HEADERS
    row = dict(zip(rows[0], rows[1]))
    assert row["Comment"] == 'Said "wow", twice'
    assert row["Rating"] == "4.5"
    assert row["Replied"] == "No"
