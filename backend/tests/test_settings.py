from mrchooks.services import settings_service


class TestSettingsApi:

    def test_put_and_get_round_trip(self, client, db_session):
        resp = client.put("/api/settings/receipt", json={"value": {"footer": "Salamat!", "copies": 2}})
        assert resp.status_code == 200

        setting = client.get("/api/settings/receipt").get_json()["data"]
        assert setting["value"] == {"footer": "Salamat!", "copies": 2}
        assert setting["updated_at"].endswith("Z")

    def test_put_overwrites(self, client, db_session):
        client.put("/api/settings/store_name", json={"value": "Mr. Chooks"})
        client.put("/api/settings/store_name", json={"value": "Mr. Chooks Cubao"})

        assert client.get("/api/settings").get_json()["data"] == {"store_name": "Mr. Chooks Cubao"}

    def test_missing_is_404(self, client, db_session):
        assert client.get("/api/settings/nope").status_code == 404

    def test_value_required(self, client, db_session):
        assert client.put("/api/settings/x", json={}).status_code == 400
        assert client.put("/api/settings/x", json={"value": None}).status_code == 400


class TestSeedDefaults:

    def test_existing_values_are_kept(self, db_session):
        settings_service.put_setting("currency", "USD")

        created = settings_service.seed_defaults({"currency": "PHP", "store_name": "Mr. Chooks"})

        assert created == ["store_name"]
        assert settings_service.get_all_settings() == {"currency": "USD", "store_name": "Mr. Chooks"}
