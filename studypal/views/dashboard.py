from datetime import date

from flask import Blueprint, render_template, request, flash
from flask_login import login_required
from pydantic import ValidationError

from studypal.analysis.schemas import StudyPlanInput
from studypal.errors import ExternalServiceFailure
from studypal.services.stats_service import StatsService
from studypal.services.workspace import current_workspace
from studypal.stores import StudyPlanEntry
from studypal.views.forms import flash_validation_errors, get_flows

dashboard_bp = Blueprint('dashboard', __name__)


def _selected_day():
    raw = request.args.get('day', '')
    if not raw:
        return None
    try:
        return date.fromisoformat(raw)
    except ValueError:
        return None


@dashboard_bp.route('/')
@login_required
def index():
    ws = current_workspace()
    data = StatsService.get_dashboard_data(ws, selected_day=_selected_day())
    return render_template(
        'dashboard/index.html',
        data=data,
        profile=ws.profile.get(),
        form={},
        plan=None,
    )


@dashboard_bp.route('/study-plan', methods=['POST'])
@login_required
def study_plan():
    ws = current_workspace()
    form = request.form.to_dict()
    plan = None
    try:
        data = StudyPlanInput(
            goals=form.get('goals', ''),
            deadline=form.get('deadline', ''),
            learning_pace=form.get('learning_pace', 'moderate'),
        )
        plan = get_flows().study_plan(data).study_plan
    except ValidationError as e:
        flash_validation_errors(e)
    except ExternalServiceFailure as e:
        flash(f'Could not generate your study plan: {e.reason}', 'danger')
    else:
        ws.ledger.append(StudyPlanEntry(
            title=f'Study Plan: {data.goals[:60]}',
            content=plan,
        ))
        flash('Your personalized study plan is ready.', 'success')

    return render_template(
        'dashboard/index.html',
        data=StatsService.get_dashboard_data(ws),
        profile=ws.profile.get(),
        form=form,
        plan=plan,
    )
