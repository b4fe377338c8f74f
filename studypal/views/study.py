from flask import Blueprint, render_template, request, flash
from flask_login import login_required
from pydantic import ValidationError

from studypal.analysis.schemas import ExplanationInput
from studypal.errors import ExternalServiceFailure
from studypal.services.workspace import current_workspace
from studypal.stores import ExplanationEntry
from studypal.views.forms import flash_validation_errors, get_flows

study_bp = Blueprint('study', __name__, url_prefix='/study')

LEVELS = ('Simple', 'Detailed', 'Expert')


def format_explanation(result) -> str:
    """Markdown stored in the ledger for an explanation."""
    parts = [f"**Summary**\n\n{result.summary}", result.detailed_explanation]
    if result.analogy:
        parts.append(f"**Analogy**\n\n{result.analogy}")
    return '\n\n'.join(parts)


@study_bp.route('/explanations', methods=['GET', 'POST'])
@login_required
def explanations():
    form = request.form.to_dict()
    result = None
    if request.method == 'POST':
        try:
            data = ExplanationInput(
                topic=form.get('topic', ''),
                level=form.get('level', 'Detailed'),
            )
            result = get_flows().explanation(data)
        except ValidationError as e:
            flash_validation_errors(e)
        except ExternalServiceFailure as e:
            flash(f'Could not generate the explanation: {e.reason}', 'danger')
        else:
            current_workspace().ledger.append(ExplanationEntry(
                title=f'Explanation: {data.topic}',
                content=format_explanation(result),
                topic=data.topic,
            ))
    return render_template('study/explanations.html', form=form, result=result, levels=LEVELS)
