"""
Golden Record decoder API.

REST endpoints and an SSE result stream for interactive exploration: load a
recording, seek, submit decodes, poll results, watch worker health.
"""

from __future__ import annotations

import time
from typing import Generator

from flask import Blueprint, Response, jsonify, request

from voyager.errors import DecodeError, QueueFullError, VoyagerError
from voyager.explorer import NoRecordingError, get_explorer
from voyager.logging import get_logger
from voyager.session import SessionState
from voyager.sse import format_sse, keepalive
from voyager.sstv.params import DecoderParams
from voyager.sstv.presets import PRESETS

logger = get_logger('voyager.routes.decoder')

decoder_bp = Blueprint('decoder', __name__, url_prefix='/api/decoder')

# SSE polling period and keepalive interval (seconds)
STREAM_POLL_INTERVAL = 0.05
STREAM_KEEPALIVE = 15.0

# Default envelope resolution for /waveform
WAVEFORM_BUCKETS = 1000


def _error(message: str, status: int = 400) -> tuple[Response, int]:
    return jsonify({'status': 'error', 'message': message}), status


def _params_from(data: dict) -> DecoderParams:
    return DecoderParams.from_dict(data.get('params', data), base=get_explorer().params)


# =============================================================================
# RECORDING / CURSOR
# =============================================================================


@decoder_bp.route('/load', methods=['POST'])
def load_recording() -> Response:
    """Load a WAV file from a server-side path."""
    data = request.get_json(silent=True) or {}
    path = data.get('path')
    if not path:
        return _error('path is required')

    try:
        recording = get_explorer().load(path)
    except VoyagerError as e:
        logger.error(f"Failed to load {path}: {e}")
        return _error(str(e))

    return jsonify({
        'status': 'success',
        'sample_rate': recording.sample_rate,
        'channels': recording.channel_count,
        'duration_secs': recording.duration_secs,
        'samples': len(recording.channels[0]),
    })


@decoder_bp.route('/seek', methods=['POST'])
def seek() -> Response:
    data = request.get_json(silent=True) or {}
    try:
        view = get_explorer().seek(int(data.get('offset', 0)), data.get('channel'))
    except NoRecordingError as e:
        return _error(str(e), 409)
    except (TypeError, ValueError) as e:
        return _error(f'Invalid offset: {e}')
    return jsonify({'status': 'success', 'offset': view.offset})


@decoder_bp.route('/sync/next', methods=['GET'])
def next_sync() -> Response:
    offset = request.args.get('offset', type=int)
    channel = request.args.get('channel')
    try:
        position = get_explorer().next_sync(offset, channel)
    except NoRecordingError as e:
        return _error(str(e), 409)
    return jsonify({'status': 'success', 'position': position})


@decoder_bp.route('/spectrum', methods=['GET'])
def spectrum() -> Response:
    offset = request.args.get('offset', type=int)
    channel = request.args.get('channel')
    try:
        freqs, magnitudes = get_explorer().spectrum(offset, channel)
    except NoRecordingError as e:
        return _error(str(e), 409)
    return jsonify({
        'status': 'success',
        'frequencies': freqs.tolist(),
        'magnitudes': magnitudes.tolist(),
    })


@decoder_bp.route('/waveform', methods=['GET'])
def waveform() -> Response:
    """Min/max envelope for drawing the waveform between two sample offsets."""
    start = request.args.get('start', 0, type=int)
    stop = request.args.get('stop', type=int)
    buckets = request.args.get('buckets', WAVEFORM_BUCKETS, type=int)
    channel = request.args.get('channel')
    try:
        envelope = get_explorer().waveform(start, stop, buckets, channel)
    except NoRecordingError as e:
        return _error(str(e), 409)
    return jsonify({
        'status': 'success',
        'start': start,
        'envelope': envelope.tolist(),
    })


# =============================================================================
# DECODING
# =============================================================================


@decoder_bp.route('/params', methods=['POST'])
def set_params() -> Response:
    data = request.get_json(silent=True) or {}
    try:
        params = _params_from(data)
        get_explorer().set_params(params)
    except DecodeError as e:
        return _error(str(e))
    except (TypeError, ValueError) as e:
        return _error(f'Invalid parameters: {e}')
    return jsonify({'status': 'success', 'params': params.to_dict()})


@decoder_bp.route('/decode', methods=['POST'])
def submit_decode() -> Response:
    """Queue a decode; the result arrives through /results or /stream."""
    data = request.get_json(silent=True) or {}
    explorer = get_explorer()
    try:
        params = _params_from(data) if data else None
        offset = data.get('offset')
        request_id = explorer.decode(
            offset=int(offset) if offset is not None else None,
            params=params,
            channel=data.get('channel'),
        )
    except NoRecordingError as e:
        return _error(str(e), 409)
    except QueueFullError as e:
        return _error(str(e), 429)
    except DecodeError as e:
        return _error(str(e))
    except VoyagerError as e:
        return _error(str(e), 503)
    except (TypeError, ValueError) as e:
        return _error(f'Invalid request: {e}')

    return jsonify({'status': 'queued', 'id': request_id}), 202


@decoder_bp.route('/results', methods=['GET'])
def poll_results() -> Response:
    results = get_explorer().tick()
    return jsonify({
        'status': 'success',
        'results': [r.to_dict() for r in results],
    })


@decoder_bp.route('/stream', methods=['GET'])
def stream_results() -> Response:
    """SSE stream of decode results as they complete, plus periodic health."""
    explorer = get_explorer()
    health_interval = explorer.config.worker.health_check_interval_ms / 1000.0

    def generate() -> Generator[str, None, None]:
        last_keepalive = last_health = time.monotonic()
        while True:
            results = explorer.tick()
            for result in results:
                yield format_sse(result.to_dict(), event='result')
            now = time.monotonic()
            if now - last_health >= health_interval:
                yield format_sse(explorer.health().to_dict(), event='health')
                last_health = now
            if not results and now - last_keepalive >= STREAM_KEEPALIVE:
                yield keepalive()
                last_keepalive = now
            time.sleep(STREAM_POLL_INTERVAL)

    response = Response(generate(), mimetype='text/event-stream')
    response.headers['Cache-Control'] = 'no-cache'
    response.headers['X-Accel-Buffering'] = 'no'
    return response


@decoder_bp.route('/export', methods=['POST'])
def export_result() -> Response:
    data = request.get_json(silent=True) or {}
    if 'id' not in data or not data.get('path'):
        return _error('id and path are required')
    try:
        path = get_explorer().export(int(data['id']), data['path'])
    except VoyagerError as e:
        return _error(str(e), 404)
    return jsonify({'status': 'success', 'path': str(path)})


# =============================================================================
# WORKER / STATUS
# =============================================================================


@decoder_bp.route('/health', methods=['GET'])
def health() -> Response:
    status = get_explorer().health()
    return jsonify({'status': 'success', **status.to_dict()})


@decoder_bp.route('/restart', methods=['POST'])
def restart_worker() -> Response:
    explorer = get_explorer()
    explorer.restart()
    return jsonify({
        'status': 'success',
        'worker_id': explorer.supervisor.worker_id,
        'restart_count': explorer.supervisor.restart_count,
    })


@decoder_bp.route('/status', methods=['GET'])
def status() -> Response:
    return jsonify({'status': 'success', **get_explorer().status()})


@decoder_bp.route('/presets', methods=['GET'])
def presets() -> Response:
    return jsonify({
        'status': 'success',
        'presets': [{'name': p.name, **p.params.to_dict()} for p in PRESETS],
    })


@decoder_bp.route('/session', methods=['GET'])
def get_session() -> Response:
    return jsonify({'status': 'success', 'session': get_explorer().session_state().__dict__})


@decoder_bp.route('/session', methods=['POST'])
def restore_session() -> Response:
    data = request.get_json(silent=True) or {}
    try:
        state = SessionState(**{
            k: v for k, v in data.items() if k in SessionState.__dataclass_fields__
        })
        get_explorer().restore(state)
    except (TypeError, ValueError, VoyagerError) as e:
        return _error(f'Could not restore session: {e}')
    return jsonify({'status': 'success'})
