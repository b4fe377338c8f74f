from flask import Blueprint, render_template, redirect, url_for, flash, request, abort
from flask_login import login_required

from studypal.errors import NotFound
from studypal.services.workspace import current_workspace
from studypal.stores import HistoryType

history_bp = Blueprint('history', __name__, url_prefix='/history')


@history_bp.route('/')
@login_required
def index():
    ws = current_workspace()
    kind = request.args.get('type', '')
    items = ws.ledger.list()
    if kind:
        try:
            items = ws.ledger.of_type(HistoryType(kind))
        except ValueError:
            kind = ''
    return render_template(
        'history/index.html',
        items=items,
        kind=kind,
        types=list(HistoryType),
        students={s.id: s for s in ws.roster.list()},
    )


@history_bp.route('/<item_id>')
@login_required
def detail(item_id):
    try:
        item = current_workspace().ledger.require(item_id)
    except NotFound:
        abort(404)
    return render_template('history/detail.html', item=item)


@history_bp.route('/clear', methods=['POST'])
@login_required
def clear():
    current_workspace().ledger.clear()
    flash('History cleared.', 'success')
    return redirect(url_for('history.index'))
