import os
import re

import pytest
import yaml

DOCKER_DIR = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "docker")


def read(*parts):
    with open(os.path.join(DOCKER_DIR, *parts), "r", encoding="utf-8") as f:
        return f.read()


def parse_postgresql_conf(text):
    settings = {}
    for line in text.splitlines():
        line = line.split("#", 1)[0].strip()
        if not line:
            continue
        key, value = (part.strip() for part in line.split("=", 1))
        settings[key] = value.strip("'")
    return settings


def test_postgresql_conf_settings():
    assert parse_postgresql_conf(read("postgresql.conf")) == {
        "listen_addresses": "localhost",
        "port": "5432",
        "shared_buffers": "4GB",
        "work_mem": "4MB",
        "maintenance_work_mem": "64MB",
        "wal_level": "minimal",
        "fsync": "on",
        "synchronous_commit": "on",
        "wal_buffers": "-1",
        "default_statistics_target": "100",
        "random_page_cost": "4.0",
        "effective_cache_size": "4GB",
        "autovacuum": "on",
        "log_autovacuum_min_duration": "0",
        "autovacuum_max_workers": "3",
    }


class TestNginxServerBlock:
    @pytest.fixture(scope="class")
    def conf(self):
        return read("nginx", "biomedgps.conf")

    def test_virtual_host(self, conf):
        assert re.search(r"^\s*listen 80;", conf, re.MULTILINE)
        assert "server_name biomedgps.example.com;" in conf

    def test_proxy_target(self, conf):
        location = re.search(r"location / \{(.*?)\}", conf, re.DOTALL).group(1)
        assert "proxy_pass http://127.0.0.1:80/;" in location

    @pytest.mark.parametrize("header", ["Host", "X-Real-IP", "X-Forwarded-For", "X-Forwarded-Proto"])
    def test_forwarded_headers(self, conf, header):
        assert re.search(rf"proxy_set_header {header} \$\w+;", conf)

    def test_error_pages(self, conf):
        assert re.search(r"error_page 404 \S+;", conf)
        assert re.search(r"error_page 500 502 503 504 \S+;", conf)

    def test_braces_are_balanced(self, conf):
        assert conf.count("{") == conf.count("}")


class TestDockerCompose:
    @pytest.fixture(scope="class")
    def services(self):
        return yaml.safe_load(read("docker-compose.yaml"))["services"]

    def test_services(self, services):
        assert set(services) == {"db", "neo4j"}

    def test_db(self, services):
        db = services["db"]
        assert db["image"] == "nordata/postgre_postgresml:14-57693aa"
        assert db["volumes"] == ["./data:/var/lib/postgresql/data", "/data:/data"]
        assert set(db["environment"]) == {"POSTGRES_PASSWORD", "POSTGRES_USER"}

    def test_neo4j(self, services):
        neo4j = services["neo4j"]
        assert neo4j["image"] == "neo4j:4.3.6"
        assert neo4j["ports"] == ["7474:7474", "7687:7687"]
        assert neo4j["volumes"] == ["./neo4j-import:/var/lib/neo4j/import", "./neo4j-data:/data"]
        assert neo4j["environment"]["NEO4J_dbms_memory_heap_maxSize"] == "512M"
        assert neo4j["environment"]["NEO4J_dbms_memory_pagecache_size"] == "512M"
