from flask import Blueprint, render_template, redirect, url_for, flash, request
from flask_login import login_required

from studypal.services.practice_service import CLASS_LEVELS
from studypal.services.workspace import current_workspace
from studypal.stores.profile import ROLES

profile_bp = Blueprint('profile', __name__, url_prefix='/profile')

EDITABLE_FIELDS = ('role', 'name', 'email', 'class', 'field', 'institution')


@profile_bp.route('/', methods=['GET', 'POST'])
@login_required
def index():
    ws = current_workspace()
    profile = ws.profile.get()
    if request.method == 'POST':
        changes = {f: request.form.get(f, '') for f in EDITABLE_FIELDS if f in request.form}
        try:
            ws.profile.update(**changes)
        except ValueError as e:
            flash(str(e), 'danger')
            profile = {**profile, **changes}
        else:
            flash('Profile updated.', 'success')
            return redirect(url_for('profile.index'))
    return render_template(
        'profile/index.html',
        profile=profile,
        roles=ROLES,
        class_levels=CLASS_LEVELS,
    )
