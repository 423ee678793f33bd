"""
Tests for configuration loading and saving.
"""

import json

from torrentshare.config import (
    ShareConfig,
    TransferConfig,
    load_config,
    save_config,
    update_config,
)


class TestShareConfig:

    def test_defaults(self):
        config = ShareConfig()
        assert config.cache.path == "cache.json"
        assert config.transfer.url == "http://localhost:8080"
        assert config.transfer.staging_dir == "./dls/"
        assert config.browse.max_results == 20

    def test_from_dict_partial(self):
        config = ShareConfig.from_dict({"transfer": {"url": "http://nas:8081"}})
        assert config.transfer.url == "http://nas:8081"
        assert config.transfer.username == TransferConfig().username
        assert config.scraper.timeout == 20.0

    def test_dict_round_trip(self):
        config = ShareConfig()
        config.browse.max_results = 5
        assert ShareConfig.from_dict(config.to_dict()) == config


class TestLoadSave:

    def test_missing_file_gives_defaults(self, tmp_path):
        assert load_config(tmp_path / "none.json") == ShareConfig()

    def test_corrupt_file_gives_defaults(self, tmp_path, caplog):
        path = tmp_path / "config.json"
        path.write_text("{oops")
        assert load_config(path) == ShareConfig()
        assert "Failed to load config" in caplog.text

    def test_unknown_key_gives_defaults(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"cache": {"bogus": 1}}))
        assert load_config(path) == ShareConfig()

    def test_save_then_load(self, tmp_path):
        path = tmp_path / "sub" / "config.json"
        config = ShareConfig()
        config.cache.path = "/var/lib/torrentshare/cache.json"

        assert save_config(config, path) == path
        assert load_config(path).cache.path == "/var/lib/torrentshare/cache.json"

    def test_update_only_given_values(self, tmp_path):
        path = tmp_path / "config.json"
        save_config(ShareConfig(), path)

        update_config(path, transfer_url="http://nas:8081", browse_max_results=7)

        config = load_config(path)
        assert config.transfer.url == "http://nas:8081"
        assert config.browse.max_results == 7
        assert config.transfer.username == "admin"
