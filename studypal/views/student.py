from flask import Blueprint, render_template, redirect, url_for, flash, request
from flask_login import login_required
from pydantic import ValidationError

from studypal.analysis.analytics import student_performance
from studypal.analysis.schemas import PracticeTestForChildInput
from studypal.errors import DuplicateKey, ExternalServiceFailure
from studypal.services.practice_service import CLASS_LEVELS, PracticeService
from studypal.services.workspace import current_workspace
from studypal.stores import PracticeTestEntry, Student, generate_student_id
from studypal.views.forms import flash_validation_errors, get_flows

student_bp = Blueprint('student', __name__, url_prefix='/students')


def _render_roster(ws, form=None):
    students = ws.roster.list()
    return render_template(
        'student/list.html',
        students=students,
        performance=student_performance(ws.ledger.list(), [s.id for s in students]),
        class_levels=CLASS_LEVELS,
        form=form or {},
    )


@student_bp.route('/')
@login_required
def list_students():
    return _render_roster(current_workspace())


@student_bp.route('/add', methods=['POST'])
@login_required
def add_student():
    ws = current_workspace()
    form = request.form.to_dict()
    name = form.get('name', '').strip()
    class_name = form.get('class', '').strip()
    student_id = form.get('id', '').strip() or generate_student_id()

    if len(name) < 2:
        flash('Name must be at least 2 characters.', 'danger')
        return _render_roster(ws, form)
    if not class_name:
        flash('Please choose a class.', 'danger')
        return _render_roster(ws, form)

    try:
        ws.roster.add(Student(id=student_id, name=name, class_name=class_name))
    except DuplicateKey as e:
        flash(str(e), 'danger')
        return _render_roster(ws, form)
    flash(f'Added {name} to your roster.', 'success')
    return redirect(url_for('student.list_students'))


@student_bp.route('/<student_id>/remove', methods=['POST'])
@login_required
def remove_student(student_id):
    if current_workspace().roster.remove(student_id):
        flash('Student removed.', 'success')
    return redirect(url_for('student.list_students'))


def _render_detail(ws, student_id, form=None):
    student = ws.roster.get(student_id)
    if student is None:
        return render_template('student/detail.html', student=None, student_id=student_id), 404

    items = ws.ledger.for_student(student.id)
    tests = [i for i in items if isinstance(i, PracticeTestEntry) and i.percentage is not None]
    return render_template(
        'student/detail.html',
        student=student,
        student_id=student_id,
        items=items,
        tests=tests,
        pending=ws.ledger.pending_assignments(student.id),
        performance=student_performance(items, [student.id])[student.id],
        form=form or {},
    )


@student_bp.route('/<student_id>')
@login_required
def detail(student_id):
    return _render_detail(current_workspace(), student_id)


@student_bp.route('/<student_id>/assign', methods=['POST'])
@login_required
def assign_test(student_id):
    ws = current_workspace()
    student = ws.roster.get(student_id)
    if student is None:
        return _render_detail(ws, student_id)

    form = request.form.to_dict()
    try:
        data = PracticeTestForChildInput(
            student_id=student.id,
            topic=form.get('topic', ''),
            number_of_questions=form.get('number_of_questions', '5') or 5,
            time_limit=form.get('time_limit', '15') or 15,
        )
        result = get_flows().practice_test_for_child(data)
    except ValidationError as e:
        flash_validation_errors(e)
        return _render_detail(ws, student_id, form)
    except ExternalServiceFailure as e:
        flash(f'Could not create the test: {e.reason}', 'danger')
        return _render_detail(ws, student_id, form)

    PracticeService.assign_test(
        ws.ledger,
        student,
        topic=data.topic,
        answer_key=result.answer_key,
        time_limit=data.time_limit,
        subject=form.get('subject', '').strip() or None,
    )
    flash(f'Test on {data.topic} assigned to {student.name}.', 'success')
    return redirect(url_for('student.detail', student_id=student.id))
