"""
API tests for the signal board: plan visibility, risk/reward and lifecycle.
"""


def approve_plan(client, admin_headers, user_headers, name="vip", price="197"):
    plan = client.post("/api/plans", json={"name": name, "price": price}, headers=admin_headers).json()
    request = client.post("/api/subscription-requests", json={"plan_id": plan["id"]}, headers=user_headers).json()
    response = client.post(f"/admin/subscription-requests/{request['id']}/approve", headers=admin_headers)
    assert response.status_code == 200, response.text
    return plan


class TestSignalCreation:
    def test_create_computes_risk_reward(self, eurusd_signal):
        assert eurusd_signal["pair"] == "EURUSD"
        assert eurusd_signal["status"] == "active"
        assert eurusd_signal["risk_reward"] == "1:1.5"
        assert eurusd_signal["result"] is None
        assert eurusd_signal["display_result"] is None

    def test_misordered_levels_rejected(self, client, admin_headers):
        response = client.post(
            "/api/signals",
            json={
                "pair": "EURUSD", "direction": "BUY",
                "entry_price": "1.0820", "take_profit_price": "1.0800", "stop_loss_price": "1.0790",
            },
            headers=admin_headers,
        )
        assert response.status_code == 422
        assert response.json()["error"] == "InvalidSignalLevelsError"

    def test_unknown_pair_rejected(self, client, admin_headers):
        response = client.post(
            "/api/signals",
            json={
                "pair": "FAKEJPY", "direction": "SELL",
                "entry_price": "110", "take_profit_price": "109", "stop_loss_price": "111",
            },
            headers=admin_headers,
        )
        assert response.status_code == 422
        assert response.json()["error"] == "UnknownInstrumentError"

    def test_users_cannot_create(self, client, user_headers):
        response = client.post(
            "/api/signals",
            json={
                "pair": "EURUSD", "direction": "BUY",
                "entry_price": "1.0820", "take_profit_price": "1.0850", "stop_loss_price": "1.0800",
            },
            headers=user_headers,
        )
        assert response.status_code == 403


class TestVisibility:
    def test_free_user_sees_free_signals(self, client, eurusd_signal, user_headers):
        signals = client.get("/api/signals", headers=user_headers).json()
        assert [s["id"] for s in signals] == [eurusd_signal["id"]]

    def test_plan_restricted_signal(self, client, admin_headers, user_headers):
        signal = client.post(
            "/api/signals",
            json={
                "pair": "XAUUSD", "direction": "SELL",
                "entry_price": "2350.0", "take_profit_price": "2340.0", "stop_loss_price": "2355.0",
                "allowed_plans": ["vip"],
            },
            headers=admin_headers,
        ).json()
        assert signal["risk_reward"] == "1:2.0"
        assert client.get("/api/signals", headers=user_headers).json() == []
        assert client.get(f"/api/signals/{signal['id']}", headers=user_headers).status_code == 403

        approve_plan(client, admin_headers, user_headers)
        signals = client.get("/api/signals", headers=user_headers).json()
        assert [s["id"] for s in signals] == [signal["id"]]

    def test_admin_sees_everything(self, client, admin_headers, eurusd_signal):
        client.put(f"/api/signals/{eurusd_signal['id']}", json={"allowed_plans": []}, headers=admin_headers)
        assert len(client.get("/api/signals", headers=admin_headers).json()) == 1

    def test_status_filter(self, client, admin_headers, eurusd_signal):
        assert client.get("/api/signals?status=closed", headers=admin_headers).json() == []
        assert len(client.get("/api/signals?status=active", headers=admin_headers).json()) == 1

    def test_requires_login(self, client):
        assert client.get("/api/signals").status_code == 401


class TestLifecycle:
    def test_close_with_outcome(self, client, admin_headers, eurusd_signal):
        response = client.post(
            f"/api/signals/{eurusd_signal['id']}/close", json={"outcome": "TP1"}, headers=admin_headers
        )
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "closed"
        assert body["result"] == 30
        assert body["display_result"] == 30
        assert body["closed_at"] is not None

    def test_close_with_result(self, client, admin_headers, eurusd_signal):
        body = client.post(
            f"/api/signals/{eurusd_signal['id']}/close", json={"result": "-12.6"}, headers=admin_headers
        ).json()
        assert body["result"] == -12.6
        assert body["display_result"] == -13

    def test_close_without_result(self, client, admin_headers, eurusd_signal):
        response = client.post(f"/api/signals/{eurusd_signal['id']}/close", json={}, headers=admin_headers)
        assert response.status_code == 422

    def test_terminal_signal_rejects_transitions(self, client, admin_headers, eurusd_signal):
        signal_id = eurusd_signal["id"]
        client.post(f"/api/signals/{signal_id}/cancel", headers=admin_headers)

        for response in (
            client.post(f"/api/signals/{signal_id}/close", json={"result": 10}, headers=admin_headers),
            client.post(f"/api/signals/{signal_id}/close", json={"outcome": "SL"}, headers=admin_headers),
            client.post(f"/api/signals/{signal_id}/cancel", headers=admin_headers),
            client.put(f"/api/signals/{signal_id}", json={"analysis": "late edit"}, headers=admin_headers),
        ):
            assert response.status_code == 409
            assert response.json()["error"] == "IllegalTransitionError"

    def test_delete_from_any_state(self, client, admin_headers, eurusd_signal):
        signal_id = eurusd_signal["id"]
        client.post(f"/api/signals/{signal_id}/close", json={"outcome": "SL"}, headers=admin_headers)
        assert client.delete(f"/api/signals/{signal_id}", headers=admin_headers).status_code == 200
        assert client.get(f"/api/signals/{signal_id}", headers=admin_headers).status_code == 404

    def test_users_cannot_close(self, client, user_headers, eurusd_signal):
        response = client.post(f"/api/signals/{eurusd_signal['id']}/close", json={"result": 5}, headers=user_headers)
        assert response.status_code == 403

    def test_update_revalidates_levels(self, client, admin_headers, eurusd_signal):
        response = client.put(
            f"/api/signals/{eurusd_signal['id']}", json={"stop_loss_price": "1.0900"}, headers=admin_headers
        )
        assert response.status_code == 422
        response = client.put(
            f"/api/signals/{eurusd_signal['id']}", json={"stop_loss_price": "1.0810"}, headers=admin_headers
        )
        assert response.status_code == 200
        assert response.json()["risk_reward"] == "1:3.0"


class TestSignalStats:
    def test_stats_recomputed(self, client, admin_headers, user_headers, eurusd_signal):
        second = client.post(
            "/api/signals",
            json={
                "pair": "USDJPY", "direction": "SELL",
                "entry_price": "110.50", "take_profit_price": "110.00", "stop_loss_price": "110.80",
            },
            headers=admin_headers,
        ).json()
        client.post(f"/api/signals/{eurusd_signal['id']}/close", json={"outcome": "TP1"}, headers=admin_headers)
        client.post(f"/api/signals/{second['id']}/close", json={"outcome": "SL"}, headers=admin_headers)

        stats = client.get("/api/signals/stats", headers=user_headers).json()
        assert stats["closed_signals"] == 2
        assert stats["winning_signals"] == 1
        assert stats["win_rate"] == 50
        assert stats["total_pips"] == 0
