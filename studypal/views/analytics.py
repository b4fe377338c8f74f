from flask import Blueprint, render_template, redirect, url_for, flash, request
from flask_login import login_required

from studypal.services.stats_service import StatsService
from studypal.services.workspace import current_workspace

analytics_bp = Blueprint('analytics', __name__, url_prefix='/analytics')


@analytics_bp.route('/')
@login_required
def index():
    data = StatsService.get_analytics_data(current_workspace())
    return render_template('analytics/index.html', data=data)


@analytics_bp.route('/topics/add', methods=['POST'])
@login_required
def add_topic():
    topic = request.form.get('topic', '').strip()
    subject = request.form.get('subject', '').strip()
    if len(topic) < 2:
        flash('Topic must be at least 2 characters.', 'danger')
    elif current_workspace().topics.add(topic, subject):
        flash(f'Now tracking {topic}.', 'success')
    else:
        flash(f'{topic} is already tracked.', 'info')
    return redirect(url_for('analytics.index'))


@analytics_bp.route('/topics/remove', methods=['POST'])
@login_required
def remove_topic():
    topic = request.form.get('topic', '')
    if current_workspace().topics.remove(topic):
        flash(f'Stopped tracking {topic}.', 'success')
    return redirect(url_for('analytics.index'))
