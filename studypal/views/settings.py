import logging

from flask import Blueprint, render_template, redirect, url_for, flash, request, current_app
from flask_login import login_required, current_user

from studypal.analysis.llm import get_available_providers
from studypal.analysis.llm.config import MODEL_CONFIG
from studypal.extensions import db
from studypal.models import UserSetting
from studypal.services.workspace import current_workspace

logger = logging.getLogger(__name__)

settings_bp = Blueprint('settings', __name__, url_prefix='/settings')


@settings_bp.route('/')
@login_required
def index():
    user_ai_provider = UserSetting.ai_provider(
        current_user.id, current_app.config.get('AI_PROVIDER', 'gemini')
    )
    user_has_key = {
        name: bool(UserSetting.get(current_user.id, info['api_key_setting']))
        for name, info in MODEL_CONFIG.items()
    }
    return render_template(
        'settings/index.html',
        user_ai_provider=user_ai_provider,
        user_has_key=user_has_key,
        model_config=MODEL_CONFIG,
        available=set(get_available_providers()),
        stored_keys=current_workspace().store.keys(),
    )


@settings_bp.route('/ai', methods=['POST'])
@login_required
def save_ai_config():
    """Save user-level AI provider configuration."""
    provider = request.form.get('ai_provider', '')
    if provider not in MODEL_CONFIG:
        flash('Unknown AI provider.', 'danger')
        return redirect(url_for('settings.index'))

    UserSetting.save_ai_config(current_user.id, provider, {
        info['api_key_setting']: request.form.get(info['api_key_setting'], '')
        for info in MODEL_CONFIG.values()
    })
    db.session.commit()
    logger.info(f"User {current_user.id} switched AI provider to {provider}")
    flash('AI settings saved.', 'success')
    return redirect(url_for('settings.index'))


@settings_bp.route('/reset', methods=['POST'])
@login_required
def reset():
    """Erase all locally stored data (history, roster, topics, profile)."""
    current_workspace().reset()
    flash('All your local data has been cleared.', 'success')
    return redirect(url_for('dashboard.index'))
