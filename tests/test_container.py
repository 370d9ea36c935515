"""Tests for container wiring."""

from food_tracker.config import Settings
from food_tracker.containers import build_container


def test_build_container_creates_services(settings: Settings) -> None:
    container = build_container(settings)
    received: list[int] = []
    container.live_entries.subscribe(3, lambda entries: received.append(len(entries)))

    container.mutation_service.add_food(3, "Soup")

    assert received == [0, 1]
    assert container.query_service.recent_names() == ["Soup"]
    container.close_resources()


def test_settings_read_environment(monkeypatch) -> None:
    monkeypatch.setenv("DATABASE_PATH", "/tmp/custom.db")
    monkeypatch.setenv("SUGGESTION_LIMIT", "5")

    settings = Settings()

    assert settings.database_path == "/tmp/custom.db"
    assert settings.suggestion_limit == 5
    assert settings.popular_window_days is None
