"""
Flask UI Application for ExtratorZap Maps
=========================================
Single page with the search form and results table, plus the JSON API the
page calls: search, CSV/Excel export and health.
"""

from flask import Flask, render_template, request, jsonify, send_file
import secrets
from datetime import datetime
from io import BytesIO

from extratorzap.config.settings import load_settings
from extratorzap.errors import BusinessLookupError, NothingToExport, ValidationError
from extratorzap.lookup.business_lookup import create_business_lookup
from extratorzap.session.search_session import SearchSession, BUSY_MESSAGE, FIELDS
from extratorzap.utils.helpers import setup_logger, set_log_level

settings = load_settings()
set_log_level(settings.LOG_LEVEL)
logger = setup_logger(__name__)

app = Flask(__name__)
app.secret_key = secrets.token_hex(16)

# A missing API key is reported here but only fails the first search
business_lookup, config_error = create_business_lookup(settings)
if config_error:
    logger.error(config_error.message)

# In-memory search sessions, keyed by session id, oldest first
session_data = {}
MAX_SESSIONS = 500

DEFAULT_FORM = {
    "country": "Brasil",
    "region": "São Paulo",
    "city": "São Paulo",
    "sector": "restaurante",
}

XLSX_MIMETYPE = 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'


def _store_session(session_id, sess):
    while len(session_data) >= MAX_SESSIONS:
        oldest = next(iter(session_data))
        logger.info(f"Dropping search session {oldest}")
        del session_data[oldest]
    session_data[session_id] = sess


@app.route('/')
def index():
    """Main page - search form and results"""
    return render_template('index.html', form=DEFAULT_FORM)


@app.route('/api/search', methods=['POST'])
def api_search():
    """Run one business lookup for the submitted form"""
    data = request.get_json(silent=True) or {}
    session_id = data.get('session_id')
    sess = session_data.get(session_id) if isinstance(session_id, str) else None
    fields = {name: str(data.get(name) or "") for name in FIELDS}

    if sess is not None and sess.is_loading:
        return jsonify({"error": BUSY_MESSAGE, "session_id": session_id}), 409

    if sess is None:
        sess = SearchSession()
        sess.update_fields(**fields)
        try:
            sess.validate()
        except ValidationError as e:
            # Not stored: a rejected form does not open a session
            return jsonify({"error": e.message, "session_id": None, **sess.to_dict()}), 400
        session_id = secrets.token_hex(8)
        _store_session(session_id, sess)
    else:
        sess.update_fields(**fields)

    error = sess.submit(business_lookup)

    body = {"session_id": session_id, **sess.to_dict()}
    if isinstance(error, ValidationError):
        return jsonify({"error": error.message, **body}), 400
    if isinstance(error, BusinessLookupError):
        return jsonify({"error": error.message, **body}), 502

    return jsonify({"success": True, "results_found": len(sess.results), **body})


def _download(session_id, export, mimetype):
    if session_id not in session_data:
        return jsonify({"error": "Invalid session"}), 404

    try:
        filename, payload = export(session_data[session_id])
    except NothingToExport as e:
        return jsonify({"error": e.message}), 400

    logger.info(f"Exporting {filename}")
    return send_file(
        BytesIO(payload),
        as_attachment=True,
        download_name=filename,
        mimetype=mimetype
    )


@app.route('/api/export/csv/<session_id>', methods=['GET'])
def api_export_csv(session_id):
    """Download the current results as CSV"""
    return _download(session_id, SearchSession.export_csv, 'text/csv; charset=utf-8')


@app.route('/api/export/excel/<session_id>', methods=['GET'])
def api_export_excel(session_id):
    """Download the current results as an Excel workbook"""
    return _download(session_id, SearchSession.export_excel, XLSX_MIMETYPE)


@app.route('/health')
def health():
    """Health check"""
    return jsonify({
        "status": "ok",
        "timestamp": datetime.now().isoformat(),
        "lookup_configured": config_error is None
    })


def main():
    logger.info(f"Starting ExtratorZap Maps at http://{settings.FLASK_HOST}:{settings.FLASK_PORT}")
    app.run(debug=settings.FLASK_DEBUG, host=settings.FLASK_HOST, port=settings.FLASK_PORT)


if __name__ == '__main__':
    main()
