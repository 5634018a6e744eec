"""HTTP surface: versioned blueprints mounted under ``API_BASE_PREFIX``."""

from __future__ import annotations

from collections.abc import Iterable

from flask import Blueprint, Flask


def _join_prefix(base_prefix: str, rel_prefix: str) -> str:
    segments = [s for s in (base_prefix.strip("/"), rel_prefix.strip("/")) if s]
    return "/" + "/".join(segments)


def register_blueprint_group(
    app: Flask,
    *,
    base_prefix: str,
    entries: Iterable[tuple[Blueprint, str]],
) -> None:
    """Mount each blueprint at ``base_prefix`` + its relative prefix.

    :param app: Application receiving the blueprints.
    :type app: flask.Flask
    :param base_prefix: Version root, e.g. ``"/api/v1"``.
    :type base_prefix: str
    :param entries: ``(blueprint, relative_prefix)`` pairs; an empty relative
        prefix mounts the blueprint at the version root.
    :type entries: Iterable[tuple[flask.Blueprint, str]]
    """

    for bp, rel_prefix in entries:
        app.register_blueprint(bp, url_prefix=_join_prefix(base_prefix, rel_prefix))


def init_app(app: Flask) -> None:
    """Register the available API versions on the Flask app."""

    api_base = app.config.get("API_BASE_PREFIX", "/api")

    from subtrack.api.v1 import API_VERSION as V1
    from subtrack.api.v1 import REGISTRY as V1_REGISTRY

    register_blueprint_group(app, base_prefix=f"{api_base}/{V1}", entries=V1_REGISTRY)


__all__ = ["init_app", "register_blueprint_group"]
