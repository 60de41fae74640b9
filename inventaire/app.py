"""Flask application exposing the inventory controller to the presentation layer."""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from flask import Flask, Response, jsonify, request
from pydantic import ValidationError

from .config import Settings, get_settings
from .controller import CONFIRM_DELETE_PROMPT, InventoryController
from .models import ExportFile, Product, coerce_identifier

_TRUTHY = {"1", "true", "yes", "on", "oui"}


def create_app(
    settings: Optional[Settings] = None,
    controller: Optional[InventoryController] = None,
) -> Flask:
    settings = settings or get_settings()
    app = Flask(__name__)
    app.config["INVENTAIRE_SETTINGS"] = settings
    app.json.ensure_ascii = False
    app.json.sort_keys = False

    manager = controller or InventoryController.from_settings(settings)
    app.extensions["inventaire"] = manager

    def _notifications() -> List[Dict[str, str]]:
        return [notification.to_dict() for notification in manager.drain_notifications()]

    def _json_error(message: str, status: int = 400, **extra: Any) -> Any:
        payload: Dict[str, Any] = {"error": message}
        payload.update(extra)
        payload["notifications"] = _notifications()
        return jsonify(payload), status

    def _resolve_product_id(raw: str) -> Optional[Any]:
        try:
            return coerce_identifier(raw)
        except ValueError:
            return None

    def _product_response(product: Product, status: int = 200) -> Any:
        return (
            jsonify({"product": product.to_dict(), "notifications": _notifications()}),
            status,
        )

    def _stats_payload() -> Dict[str, Any]:
        payload = manager.stats.to_dict()
        payload["currency"] = settings.currency
        return payload

    def _download(export: ExportFile) -> Response:
        response = Response(export.content, mimetype=export.mimetype)
        response.headers["Content-Disposition"] = f"attachment; filename={export.filename}"
        return response

    @app.get("/health")
    def health_check() -> Any:
        return jsonify({"status": "ok", "environment": settings.environment})

    @app.get("/api/products")
    def list_products() -> Any:
        term = request.args.get("q", "")
        products = manager.search(term)
        return jsonify(
            {
                "products": [product.to_dict() for product in products],
                "stats": _stats_payload(),
                "notifications": _notifications(),
            }
        )

    @app.get("/api/products/<string:product_id>")
    def get_product(product_id: str) -> Any:
        resolved = _resolve_product_id(product_id)
        product = None if resolved is None else manager.get(resolved)
        if product is None:
            return _json_error(f"Product {product_id} not found", 404)
        return _product_response(product)

    @app.post("/api/products")
    def create_product() -> Any:
        payload = _get_payload(request)
        try:
            product = manager.add(payload)
        except ValidationError as exc:
            return _json_error("Invalid product", 400, details=_validation_details(exc))
        return _product_response(product, 201)

    @app.put("/api/products/<string:product_id>")
    def update_product(product_id: str) -> Any:
        payload = _get_payload(request)
        resolved = _resolve_product_id(product_id)
        if resolved is None or manager.get(resolved) is None:
            return _json_error(f"Product {product_id} not found", 404)
        try:
            product = manager.update(resolved, payload)
        except ValidationError as exc:
            return _json_error("Invalid product", 400, details=_validation_details(exc))
        if product is None:
            return _json_error(f"Product {product_id} not found", 404)
        return _product_response(product)

    @app.delete("/api/products/<string:product_id>")
    def delete_product(product_id: str) -> Any:
        resolved = _resolve_product_id(product_id)
        if resolved is None or manager.get(resolved) is None:
            return _json_error(f"Product {product_id} not found", 404)
        confirmed = str(request.args.get("confirm", "")).strip().lower() in _TRUTHY
        removed = manager.delete(resolved, confirm=lambda _product: confirmed)
        if removed is None:
            return _json_error(CONFIRM_DELETE_PROMPT, 409, code="confirmation_required")
        return _product_response(removed)

    @app.get("/api/stats")
    def get_stats() -> Any:
        return jsonify(_stats_payload())

    @app.post("/api/import")
    def import_products() -> Any:
        upload = request.files.get("file")
        if upload is not None:
            content = upload.read()
        else:
            content = request.get_data()
        imported = manager.import_csv(content)
        if imported is None:
            return _json_error("Import failed", 400)
        return jsonify(
            {
                "imported": [product.to_dict() for product in imported],
                "count": len(imported),
                "notifications": _notifications(),
            }
        )

    @app.get("/api/export")
    def export_products() -> Any:
        export = manager.export_csv()
        if export is None:
            return _json_error("Export failed", 500)
        manager.drain_notifications()
        return _download(export)

    @app.get("/api/backup")
    def backup_products() -> Any:
        export = manager.backup()
        if export is None:
            return _json_error("Backup failed", 500)
        manager.drain_notifications()
        return _download(export)

    return app


def _get_payload(req: Any) -> Dict[str, Any]:
    if req.is_json:
        return req.get_json(silent=True) or {}
    if req.form:
        return req.form.to_dict()
    return req.get_json(silent=True) or {}


def _validation_details(exc: ValidationError) -> List[Dict[str, Any]]:
    return [
        {"field": ".".join(str(part) for part in error["loc"]), "message": error["msg"]}
        for error in exc.errors()
    ]


__all__ = ["create_app"]
