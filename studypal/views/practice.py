from flask import Blueprint, current_app, render_template, redirect, url_for, flash, request
from flask_login import login_required
from pydantic import ValidationError

from studypal.analysis.schemas import PracticeTestInput
from studypal.errors import ExternalServiceFailure
from studypal.services.practice_service import CLASS_LEVELS, PracticeService
from studypal.services.workspace import current_workspace
from studypal.stores import PracticeTestEntry, QuestionAnswer
from studypal.views.forms import flash_validation_errors, get_flows

practice_bp = Blueprint('practice', __name__, url_prefix='/practice')


def _render_generator(ws, form):
    profile = ws.profile.get()
    class_level = form.get('class_level') or profile.get('class', '')
    subjects = PracticeService.subjects_for(class_level, profile.get('field', ''))
    return render_template(
        'practice/generate.html',
        form=form,
        class_level=class_level,
        class_levels=CLASS_LEVELS,
        subjects=subjects,
        max_questions=current_app.config.get('PRACTICE_MAX_QUESTIONS', 20),
        pending=ws.ledger.pending_assignments(),
        active=PracticeService.active_test(ws),
    )


@practice_bp.route('/', methods=['GET'])
@login_required
def index():
    ws = current_workspace()
    return _render_generator(ws, request.args.to_dict())


@practice_bp.route('/generate', methods=['POST'])
@login_required
def generate():
    ws = current_workspace()
    form = request.form.to_dict()
    profile = ws.profile.get()
    class_level = form.get('class_level') or profile.get('class', '')

    subject = form.get('subject', '')
    if subject == 'other':
        subject = form.get('custom_subject', '').strip()

    try:
        data = PracticeTestInput(
            class_level=PracticeService.class_label(class_level, profile.get('field', '')),
            subject=subject,
            topic=form.get('topic', ''),
            number_of_questions=form.get('number_of_questions', '5') or 5,
        )
        if data.number_of_questions > current_app.config.get('PRACTICE_MAX_QUESTIONS', 20):
            flash('Too many questions requested.', 'danger')
            return _render_generator(ws, form)
        result = get_flows().practice_test(data)
    except ValidationError as e:
        flash_validation_errors(e)
        return _render_generator(ws, form)
    except ExternalServiceFailure as e:
        flash(f'Error generating test: {e.reason}', 'danger')
        return _render_generator(ws, form)

    PracticeService.start_test(
        ws,
        [QuestionAnswer.from_value(qa) for qa in result.answer_key],
        subject=data.subject,
        topic=data.topic,
    )
    flash('Your practice test is ready. The timer has started.', 'success')
    return redirect(url_for('practice.take'))


@practice_bp.route('/assigned/<item_id>/start', methods=['POST'])
@login_required
def start_assigned(item_id):
    ws = current_workspace()
    assignment = ws.ledger.get(item_id)
    if not isinstance(assignment, PracticeTestEntry) or not assignment.is_assignment:
        flash('That assigned test no longer exists.', 'warning')
        return redirect(url_for('practice.index'))
    if ws.ledger.completion_of(assignment.id):
        flash('That assigned test has already been completed.', 'info')
        return redirect(url_for('practice.index'))

    PracticeService.start_test(
        ws,
        assignment.content,
        subject=assignment.subject or '',
        topic=assignment.topic or '',
        assignment_id=assignment.id,
        time_limit=assignment.time_limit,
    )
    return redirect(url_for('practice.take'))


@practice_bp.route('/take', methods=['GET'])
@login_required
def take():
    ws = current_workspace()
    active = PracticeService.active_test(ws)
    if active is None:
        flash('No test in progress. Generate one first.', 'info')
        return redirect(url_for('practice.index'))
    elapsed = PracticeService.elapsed_seconds(active.get('startedAt'), ws.clock())
    return render_template('practice/take.html', test=active, elapsed=elapsed)


@practice_bp.route('/submit', methods=['POST'])
@login_required
def submit():
    ws = current_workspace()
    active = PracticeService.active_test(ws)
    if active is None:
        flash('No test in progress.', 'warning')
        return redirect(url_for('practice.index'))

    answers = [
        request.form.get(f'answer_{i}', '')
        for i in range(len(active['answerKey']))
    ]
    entry, grade = PracticeService.submit_active_test(ws, get_flows(), answers)
    if grade.fallback_used:
        flash(
            f'{grade.fallback_used} answer(s) were graded by exact match because '
            'the grader was unavailable.',
            'warning',
        )
    flash('Answers submitted! You can now review the answer key.', 'success')
    return render_template(
        'practice/result.html',
        entry=entry,
        grade=grade,
        answers=answers,
    )


@practice_bp.route('/discard', methods=['POST'])
@login_required
def discard():
    PracticeService.discard_test(current_workspace())
    flash('Test discarded.', 'info')
    return redirect(url_for('practice.index'))
