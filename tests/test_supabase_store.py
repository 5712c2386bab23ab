"""Tests for giftwise.adapters.supabase_store — PostgREST adapter."""

from datetime import date
from unittest.mock import MagicMock, patch

import httpx
import pytest

from giftwise.adapters.supabase_store import SupabaseStore, row_to_occasion, row_to_purchase
from giftwise.ports.store_port import StoreError


def _mock_client(payload=None, error=None):
    resp = MagicMock()
    resp.raise_for_status = MagicMock()
    resp.json.return_value = payload
    client = MagicMock()
    client.__enter__ = MagicMock(return_value=client)
    client.__exit__ = MagicMock(return_value=False)
    if error is not None:
        client.request.side_effect = error
    else:
        client.request.return_value = resp
    return client


def _store():
    return SupabaseStore(url="https://proj.supabase.co/", api_key="svc-key")


# ---------------------------------------------------------------------------
# Row mapping
# ---------------------------------------------------------------------------


class TestRowMapping:
    def test_occasion_with_joined_contact(self):
        occ = row_to_occasion({
            "id": 4,
            "user_id": "u1",
            "contact_id": 2,
            "occasion_type": "Birthday",
            "date": "2025-06-15",
            "notes": "Tea",
            "reminder_days_before": 7,
            "reminder_sent_date": "2025-06-08",
            "nudge_sent_date": None,
            "contacts": {"name": "Alice"},
        })
        assert occ.date == date(2025, 6, 15)
        assert occ.reminder_days_before == 7
        assert occ.reminder_sent_date == date(2025, 6, 8)
        assert occ.nudge_sent_date is None
        assert occ.contact_name == "Alice"

    def test_occasion_null_fields(self):
        occ = row_to_occasion({
            "id": 4, "user_id": "u1", "contact_id": 2, "occasion_type": "Birthday",
            "date": None, "reminder_days_before": None, "contacts": None,
        })
        assert occ.date is None
        assert occ.reminder_days_before == 14
        assert occ.contact_name == ""

    def test_purchase_takes_occasion_from_gift(self):
        p = row_to_purchase({
            "id": 1, "user_id": "u1", "gift_id": 3, "purchase_date": "2025-05-01",
            "amount": "19.90", "gifts": {"id": 3, "occasion_id": 4},
        })
        assert p.occasion_id == 4
        assert p.amount == 19.9
        assert p.purchase_date == date(2025, 5, 1)

    def test_purchase_without_gift(self):
        p = row_to_purchase({"id": 1, "user_id": "u1", "gift_id": None, "gifts": None})
        assert p.occasion_id is None


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


class TestSupabaseStore:
    def test_list_users(self):
        client = _mock_client([{"id": "u1", "email": "a@b.c", "name": "Amy"}, {"id": "u2", "email": None}])
        with patch("giftwise.adapters.supabase_store.httpx.Client", return_value=client) as mock_cls:
            users = _store().list_users()

        assert [u.id for u in users] == ["u1", "u2"]
        assert users[1].email == ""
        assert mock_cls.call_args.kwargs["base_url"] == "https://proj.supabase.co/rest/v1"
        method, path = client.request.call_args[0]
        assert (method, path) == ("GET", "/user_profiles")
        headers = client.request.call_args.kwargs["headers"]
        assert headers["apikey"] == "svc-key"
        assert headers["Authorization"] == "Bearer svc-key"

    def test_get_occasions_filters_by_user(self):
        client = _mock_client([])
        with patch("giftwise.adapters.supabase_store.httpx.Client", return_value=client):
            _store().get_occasions("u1")

        params = client.request.call_args.kwargs["params"]
        assert params["user_id"] == "eq.u1"
        assert "contacts(name)" in params["select"]

    def test_get_purchases_selects_gift_occasion(self):
        client = _mock_client([])
        with patch("giftwise.adapters.supabase_store.httpx.Client", return_value=client):
            _store().get_purchases("u1")

        params = client.request.call_args.kwargs["params"]
        assert "gifts(id,occasion_id)" in params["select"]

    def test_update_occasion_patches(self):
        client = _mock_client([{"id": 4}])
        with patch("giftwise.adapters.supabase_store.httpx.Client", return_value=client):
            _store().update_occasion(4, {"nudge_sent_date": "2025-06-01"})

        args, kwargs = client.request.call_args
        assert args == ("PATCH", "/occasions")
        assert kwargs["params"] == {"id": "eq.4"}
        assert kwargs["json"] == {"nudge_sent_date": "2025-06-01"}
        assert kwargs["headers"]["Prefer"] == "return=representation"

    def test_update_matching_no_rows_raises(self):
        client = _mock_client([])
        with patch("giftwise.adapters.supabase_store.httpx.Client", return_value=client):
            with pytest.raises(StoreError, match="No rows updated"):
                _store().update_occasion(4, {"nudge_sent_date": "2025-06-01"})

    def test_transport_error_raises_store_error(self):
        client = _mock_client(error=httpx.ConnectError("down"))
        with patch("giftwise.adapters.supabase_store.httpx.Client", return_value=client):
            with pytest.raises(StoreError):
                _store().list_users()

    def test_http_error_status_raises_store_error(self):
        request = httpx.Request("GET", "https://proj.supabase.co/rest/v1/user_profiles")
        response = httpx.Response(401, request=request, text="unauthorized")
        client = _mock_client([])
        client.request.return_value.raise_for_status.side_effect = httpx.HTTPStatusError(
            "401", request=request, response=response,
        )
        with patch("giftwise.adapters.supabase_store.httpx.Client", return_value=client):
            with pytest.raises(StoreError, match="401"):
                _store().list_users()

    def test_defaults_prefer_service_key(self):
        store = SupabaseStore()
        assert store._api_key == "fake-service-key"
        assert store._base_url == "https://example.supabase.co/rest/v1"
