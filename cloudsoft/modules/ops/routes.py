"""
Ops Routes
==========

Public health endpoint reporting registry size, disk usage and process uptime.
"""

import shutil
import time
from datetime import datetime

from flask import current_app, jsonify

from cloudsoft.core import LoggingService
from . import ops_health_bp


def _get_disk_usage():
    """Get disk usage for root partition."""
    try:
        usage = shutil.disk_usage('/')
        return {
            'total_gb': round(usage.total / (1024 ** 3), 1),
            'used_gb': round(usage.used / (1024 ** 3), 1),
            'free_gb': round(usage.free / (1024 ** 3), 1),
            'percent': round((usage.used / usage.total) * 100, 1),
        }
    except OSError as e:
        return {'total_gb': 0, 'used_gb': 0, 'free_gb': 0, 'percent': 0, 'error': str(e)}


def _get_uptime(started_at):
    """Uptime of this app process."""
    uptime_seconds = max(0.0, time.time() - started_at)

    days = int(uptime_seconds // 86400)
    hours = int((uptime_seconds % 86400) // 3600)
    minutes = int((uptime_seconds % 3600) // 60)

    return {
        'seconds': round(uptime_seconds),
        'formatted': f'{days}d {hours}h {minutes}m',
        'started_at': datetime.fromtimestamp(started_at).isoformat(),
    }


def _compute_status(disk):
    """Compute overall status and issues list from disk metrics."""
    issues = []
    status = 'ok'

    disk_pct = disk.get('percent', 0)
    if disk_pct >= 90:
        issues.append({'type': 'disk_critical', 'message': f'Disk usage critical: {disk_pct}%'})
        status = 'critical'
    elif disk_pct >= 80:
        issues.append({'type': 'disk_warning', 'message': f'Disk usage high: {disk_pct}%'})
        status = 'warning'

    return status, issues


def build_health_response():
    """Build the health check response dict and overall status."""
    ext = current_app.extensions['cloudsoft']
    disk = _get_disk_usage()
    status, issues = _compute_status(disk)

    result = {
        'status': status,
        'timestamp': datetime.now().isoformat(),
        'checks': {
            'registry': {'active_subscribers': ext.registry.count()},
            'disk': disk,
            'uptime': _get_uptime(ext.started_at),
        },
        'issues': issues,
    }

    # Only reported when a log database is configured
    error_count = LoggingService.count_recent(('ERROR', 'CRITICAL'), hours=1)
    if error_count is not None:
        result['errors_1h'] = error_count

    return result, status


@ops_health_bp.route('/')
@ops_health_bp.route('')
def health_check():
    """Public health endpoint for uptime monitors."""
    data, status = build_health_response()
    code = 503 if status == 'critical' else 200
    return jsonify(data), code
