from game_api.core.env import Environment


def test_environment_reads_settings(monkeypatch, data_dir):
    monkeypatch.setenv("PORT", "8080")
    monkeypatch.setenv("CORS_ORIGINS", "http://a.test, http://b.test")

    env = Environment()
    assert env.port == 8080
    assert env.cors_origins == ["http://a.test", "http://b.test"]
    assert env.get_storage_config()["users_file"] == str(data_dir / "users.json")
    assert env.validate()


def test_environment_summary_names_data_dir(data_dir):
    summary = str(Environment())
    assert f"Data dir: {data_dir}" in summary
    assert "Port:" in summary
