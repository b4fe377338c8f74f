import logging

from flask import Blueprint, jsonify, request
from flask_login import login_required

from studypal.analysis.analytics import student_performance
from studypal.errors import DuplicateKey, NotFound
from studypal.services.stats_service import StatsService
from studypal.services.workspace import current_workspace
from studypal.storage import APP_KEYS
from studypal.stores import HistoryType, Student, generate_student_id

logger = logging.getLogger(__name__)

api_bp = Blueprint('api', __name__, url_prefix='/api')


@api_bp.route('/history')
@login_required
def history_list():
    ws = current_workspace()
    items = ws.ledger.list()
    kind = request.args.get('type')
    if kind:
        try:
            items = ws.ledger.of_type(HistoryType(kind))
        except ValueError:
            return jsonify({'error': f'Unknown history type: {kind}'}), 400
    student_id = request.args.get('student')
    if student_id:
        items = [i for i in items if i.student_id == student_id]
    return jsonify({'items': [i.to_dict() for i in items], 'total': len(items)})


@api_bp.route('/history/<item_id>')
@login_required
def history_item(item_id):
    try:
        item = current_workspace().ledger.require(item_id)
    except NotFound as e:
        return jsonify({'error': str(e)}), 404
    return jsonify(item.to_dict())


@api_bp.route('/history', methods=['DELETE'])
@login_required
def history_clear():
    current_workspace().ledger.clear()
    return jsonify({'success': True})


@api_bp.route('/analytics')
@login_required
def analytics():
    ws = current_workspace()
    data = ws.analytics.snapshot().to_dict()
    data['trackedTopics'] = ws.tracked_topics()
    return jsonify(data)


@api_bp.route('/dashboard')
@login_required
def dashboard():
    data = StatsService.get_dashboard_data(current_workspace())
    return jsonify({
        'stats': data['stats'],
        'weekly': data['weekly'],
        'recent': [i.to_dict() for i in data['recent_items']],
        'quote': data['quote'],
    })


@api_bp.route('/tracked-topics')
@login_required
def tracked_topics():
    ws = current_workspace()
    return jsonify({
        'managed': [t.to_dict() for t in ws.topics.list()],
        'derived': ws.tracked_topics(),
    })


@api_bp.route('/tracked-topics', methods=['POST'])
@login_required
def tracked_topics_add():
    payload = request.get_json(silent=True) or {}
    topic = str(payload.get('topic', '')).strip()
    if not topic:
        return jsonify({'error': 'topic is required'}), 400
    added = current_workspace().topics.add(topic, str(payload.get('subject', '')))
    return jsonify({'added': added}), 201 if added else 200


@api_bp.route('/tracked-topics/<topic>', methods=['DELETE'])
@login_required
def tracked_topics_remove(topic):
    removed = current_workspace().topics.remove(topic)
    return jsonify({'removed': removed})


@api_bp.route('/students')
@login_required
def students():
    ws = current_workspace()
    roster = ws.roster.list()
    perf = student_performance(ws.ledger.list(), [s.id for s in roster])
    return jsonify({
        'students': [
            {**s.to_dict(), 'performance': perf[s.id]['percentage']}
            for s in roster
        ]
    })


@api_bp.route('/students', methods=['POST'])
@login_required
def students_add():
    payload = request.get_json(silent=True) or {}
    name = str(payload.get('name', '')).strip()
    class_name = str(payload.get('class', '')).strip()
    if len(name) < 2 or not class_name:
        return jsonify({'error': 'name (2+ characters) and class are required'}), 400
    student = Student(
        id=str(payload.get('id', '')).strip() or generate_student_id(),
        name=name,
        class_name=class_name,
    )
    try:
        current_workspace().roster.add(student)
    except DuplicateKey as e:
        return jsonify({'error': str(e)}), 409
    return jsonify(student.to_dict()), 201


@api_bp.route('/students/<student_id>')
@login_required
def student_detail(student_id):
    student = current_workspace().roster.get(student_id)
    if student is None:
        return jsonify({'error': 'Student not found'}), 404
    return jsonify(student.to_dict())


@api_bp.route('/students/<student_id>', methods=['DELETE'])
@login_required
def student_remove(student_id):
    removed = current_workspace().roster.remove(student_id)
    return jsonify({'removed': removed})


@api_bp.route('/export')
@login_required
def export():
    """Everything stored for the user, keyed as the web client stores it."""
    ws = current_workspace()
    return jsonify({key: ws.store.get(key) for key in APP_KEYS})
