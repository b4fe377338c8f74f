from flask import Blueprint, render_template, request, flash
from flask_login import login_required
from pydantic import ValidationError

from studypal.analysis.schemas import AskQuestionInput, SolveDoubtInput
from studypal.errors import ExternalServiceFailure
from studypal.views.forms import flash_validation_errors, get_flows

help_bp = Blueprint('help', __name__, url_prefix='/help')


@help_bp.route('/', methods=['GET', 'POST'])
@login_required
def ask():
    """Questions about using the app."""
    form = request.form.to_dict()
    answer = None
    if request.method == 'POST':
        try:
            answer = get_flows().ask_question(
                AskQuestionInput(question=form.get('question', ''))
            ).answer
        except ValidationError as e:
            flash_validation_errors(e)
        except ExternalServiceFailure as e:
            flash(f'The help assistant is unavailable: {e.reason}', 'danger')
    return render_template('help/ask.html', form=form, answer=answer)


@help_bp.route('/doubts', methods=['GET', 'POST'])
@login_required
def doubts():
    """Academic questions for the tutor."""
    form = request.form.to_dict()
    answer = None
    if request.method == 'POST':
        try:
            answer = get_flows().solve_doubt(
                SolveDoubtInput(doubt=form.get('doubt', ''))
            ).answer
        except ValidationError as e:
            flash_validation_errors(e)
        except ExternalServiceFailure as e:
            flash(f'Could not solve your doubt: {e.reason}', 'danger')
    return render_template('help/doubts.html', form=form, answer=answer)
