"""Lightweight local HTTP API for an external UI client: search, select, activate."""

import logging
import threading
from typing import Any, Dict, Optional

from flask import Flask, jsonify, request

from .exceptions import AggregateFailureError
from .finder import WindowFinder
from .models import Catalog, CatalogItem, SourceFailure

logger = logging.getLogger(__name__)

_server_thread: Optional[threading.Thread] = None


def item_to_dict(item: CatalogItem) -> Dict[str, Any]:
	"""Serialize a catalog item for JSON (icons are omitted)."""
	return {
		'id': item.id,
		'kind': item.kind.value,
		'title': item.title,
		'subtitle': item.subtitle,
		'owner_name': item.owner_name,
		'window_handle': item.window_handle,
		'tab_index': item.tab_index,
		'url': item.url,
		'process_id': item.process_id,
		'last_access_time': item.last_access_time,
	}


def failure_to_dict(failure: SourceFailure) -> Dict[str, str]:
	return {'source': failure.source, 'kind': failure.kind.value, 'message': failure.message}


def _catalog_status(catalog: Catalog) -> Dict[str, Any]:
	return {
		'partial': catalog.partial,
		'failures': [failure_to_dict(f) for f in catalog.failures],
		'newly_denied': list(catalog.newly_denied),
	}


def create_app(finder: WindowFinder) -> Flask:
	"""
	Build the Flask app serving a WindowFinder.

	Args:
		finder: Finder to expose

	Returns:
		Flask application
	"""
	app = Flask("window_finder_api")

	# Basic CORS for a local file:// renderer
	@app.after_request
	def add_cors_headers(response):
		response.headers["Access-Control-Allow-Origin"] = "*"
		response.headers["Access-Control-Allow-Methods"] = "GET, POST, OPTIONS"
		response.headers["Access-Control-Allow-Headers"] = "Content-Type"
		return response

	@app.errorhandler(AggregateFailureError)
	def aggregate_failure(e):
		return jsonify({
			'status': 'error',
			'message': str(e),
			'failures': [failure_to_dict(f) for f in e.failures],
		}), 503

	def _item_from_request():
		"""Resolve the item named by the JSON body's "id" (or an error response)."""
		data = request.get_json(silent=True) or {}
		item_id = str(data.get('id', '') or '').strip()
		if not item_id:
			return None, (jsonify({'status': 'error', 'message': 'missing id'}), 400)
		item = finder.find_item(item_id)
		if item is None:
			return None, (jsonify({'status': 'error', 'message': f'unknown item {item_id}'}), 404)
		return item, None

	@app.get("/health")
	def health():
		return jsonify({"status": "ok"})

	@app.route("/search", methods=["GET", "OPTIONS"])
	def search():
		if request.method == "OPTIONS":
			return ("", 204)
		query = request.args.get('q', '') or ''
		limit = request.args.get('limit', type=int)
		catalog = finder.get_catalog()
		results = finder.engine.search(query, catalog.items, finder.ledger)
		if query.strip():
			finder.record_query(query)
		if limit is not None and limit >= 0:
			results = results[:limit]
		response = {'items': [item_to_dict(item) for item in results]}
		response.update(_catalog_status(catalog))
		return jsonify(response)

	@app.route("/suggest", methods=["GET", "OPTIONS"])
	def suggest():
		if request.method == "OPTIONS":
			return ("", 204)
		prefix = request.args.get('prefix', '') or ''
		return jsonify({'suggestions': finder.get_search_suggestions(prefix)})

	@app.route("/history", methods=["GET", "OPTIONS"])
	def history():
		if request.method == "OPTIONS":
			return ("", 204)
		return jsonify({'history': finder.get_search_history()})

	@app.route("/select", methods=["POST", "OPTIONS"])
	def select():
		if request.method == "OPTIONS":
			return ("", 204)
		item, error = _item_from_request()
		if error:
			return error
		finder.record_selection(item)
		return jsonify({'status': 'ok'})

	@app.route("/activate", methods=["POST", "OPTIONS"])
	def activate():
		if request.method == "OPTIONS":
			return ("", 204)
		item, error = _item_from_request()
		if error:
			return error
		if finder.activate(item):
			return jsonify({'status': 'ok'})
		return jsonify({'status': 'error', 'message': f'could not activate {item.id}'}), 500

	@app.route("/refresh", methods=["POST", "OPTIONS"])
	def refresh():
		if request.method == "OPTIONS":
			return ("", 204)
		catalog = finder.refresh()
		response = {'status': 'ok', 'count': len(catalog)}
		response.update(_catalog_status(catalog))
		return jsonify(response)

	@app.route("/invalidate", methods=["POST", "OPTIONS"])
	def invalidate():
		if request.method == "OPTIONS":
			return ("", 204)
		finder.invalidate()
		return jsonify({'status': 'ok'})

	@app.route("/permissions", methods=["GET", "OPTIONS"])
	def permissions():
		if request.method == "OPTIONS":
			return ("", 204)
		return jsonify({'pending': finder.aggregator.pending_permission_prompts()})

	@app.route("/permissions/acknowledge", methods=["POST", "OPTIONS"])
	def acknowledge_permission():
		if request.method == "OPTIONS":
			return ("", 204)
		data = request.get_json(silent=True) or {}
		source = str(data.get('source', '') or '').strip()
		if not source:
			return jsonify({'status': 'error', 'message': 'missing source'}), 400
		finder.aggregator.acknowledge_permission_prompt(source)
		return jsonify({'status': 'ok'})

	return app


def start_api_server(finder: WindowFinder, port: int = 8770) -> None:
	"""
	Start the local API server in a background thread.
	Only binds to 127.0.0.1.
	"""
	global _server_thread
	if _server_thread and _server_thread.is_alive():
		return
	app = create_app(finder)

	def run():
		app.run(host="127.0.0.1", port=port, debug=False, use_reloader=False)

	_server_thread = threading.Thread(target=run, daemon=True)
	_server_thread.start()
	logger.info("API server listening on http://127.0.0.1:%d", port)
