from flask import Blueprint, render_template, redirect, url_for, flash, request
from flask_login import login_required

from studypal.errors import ExternalServiceFailure
from studypal.services.report_service import ReportService
from studypal.services.workspace import current_workspace
from studypal.stores import HistoryType
from studypal.views.forms import get_flows

progress_bp = Blueprint('progress', __name__, url_prefix='/progress')


@progress_bp.route('/')
@login_required
def index():
    ws = current_workspace()
    reports = ws.ledger.of_type(HistoryType.PROGRESS_REPORT)
    return render_template(
        'progress/index.html',
        latest=reports[0] if reports else None,
        reports=reports[1:],
        students=ws.roster.list(),
    )


@progress_bp.route('/generate', methods=['POST'])
@login_required
def generate():
    ws = current_workspace()
    student = None
    student_id = request.form.get('student_id', '').strip()
    if student_id:
        student = ws.roster.get(student_id)
        if student is None:
            flash(f'Student "{student_id}" was not found.', 'warning')
            return redirect(url_for('progress.index'))
    try:
        ReportService.generate_weekly_report(ws, get_flows(), student=student)
    except ExternalServiceFailure as e:
        flash(f'Error generating report: {e.reason}', 'danger')
    else:
        flash('Report generated!', 'success')
    return redirect(url_for('progress.index'))
