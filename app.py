"""
Flask Web Application for the Questionnaire Wizard

JSON API acting as the presentation adapter: the browser renders the
step view it receives and posts edits and navigation clicks back.
"""

from flask import Flask, request, jsonify
import logging
import os

from formwizard.commands import (
    ConfirmProceedWithoutSaving,
    ConfirmSaveAndProceed,
    DismissConfirmation,
    Edit,
    RequestJump,
    RequestNext,
    RequestPrev,
    RequestSaveAndExit,
    Submit,
)
from formwizard.core.form_definition import load_form_config
from formwizard.core.navigation_controller import WizardController
from formwizard.core.submission_writer import SubmissionWriter
from formwizard.persistence import DEFAULT_NAMESPACE, FlaskSessionPersistence, JsonFilePersistence
from formwizard.results import IllegalCommand

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# Initialize Flask app
app = Flask(__name__)
app.config.update(
    SECRET_KEY=os.environ.get('WIZARD_SECRET_KEY', 'questionnaire-wizard-secret-key'),
    FORM_CONFIG_PATH=os.environ.get('WIZARD_FORM_CONFIG_PATH', 'data/health_assessment_form.json'),
    STORAGE_BACKEND=os.environ.get('WIZARD_STORAGE_BACKEND', 'file'),
    STORAGE_NAMESPACE=os.environ.get('WIZARD_STORAGE_NAMESPACE', DEFAULT_NAMESPACE),
    DRAFT_DIR=os.environ.get('WIZARD_DRAFT_DIR', 'outputs/drafts'),
    SUBMISSION_DIR=os.environ.get('WIZARD_SUBMISSION_DIR', 'outputs/submissions'),
    EXIT_URL=os.environ.get('WIZARD_EXIT_URL', '/exit'),
)

# Global state for the current wizard session
current_wizard = {
    'controller': None,
    'writer': None,
    'exited': False,
}


def create_persistence():
    """Build the persistence backend selected by STORAGE_BACKEND"""
    backend = app.config['STORAGE_BACKEND']
    namespace = app.config['STORAGE_NAMESPACE']

    if backend == 'session':
        return FlaskSessionPersistence(namespace=namespace)
    if backend == 'file':
        return JsonFilePersistence(base_dir=app.config['DRAFT_DIR'], namespace=namespace)

    raise ValueError(f"Unknown STORAGE_BACKEND: {backend}")


def _mark_exited():
    current_wizard['exited'] = True


def get_controller():
    """Return the active controller, creating (or resuming) one on first use"""
    if current_wizard['controller'] is None:
        form = load_form_config(app.config['FORM_CONFIG_PATH'])
        writer = SubmissionWriter(app.config['SUBMISSION_DIR'])

        current_wizard['controller'] = WizardController(
            form=form,
            persistence=create_persistence(),
            initial_data={},
            on_submit=writer,
            on_exit=_mark_exited,
        )
        current_wizard['writer'] = writer
        current_wizard['exited'] = False

    return current_wizard['controller']


def reset_wizard():
    """Forget the in-memory session. The persisted draft is kept."""
    current_wizard['controller'] = None
    current_wizard['writer'] = None
    current_wizard['exited'] = False


def _respond(controller, result):
    """Turn a controller result into a JSON response carrying the fresh view"""
    if isinstance(result, IllegalCommand):
        return jsonify({
            'success': False,
            'error': result.reason,
            'command': result.command_type,
            'view': controller.view().to_dict()
        }), 409

    body = {
        'success': True,
        'command': result.command_type,
        'moved': result.moved,
        'field_errors': result.field_errors,
        'exited': result.exited,
        'view': controller.view().to_dict()
    }

    if result.exited:
        body['redirect'] = app.config['EXIT_URL']

    if result.submission is not None:
        body['submitted'] = True
        body['submission_file'] = current_wizard['writer'].last_path if current_wizard['writer'] else None

    return jsonify(body)


def _run(command):
    """Apply one command with the standard error envelope"""
    try:
        controller = get_controller()
        result = controller.handle(command)
        return _respond(controller, result)

    except Exception as e:
        logger.error(f"Error handling {type(command).__name__}: {e}")
        return jsonify({
            'success': False,
            'error': str(e)
        }), 500


@app.route('/api/wizard', methods=['GET'])
def get_wizard():
    """Current step view"""
    try:
        controller = get_controller()
        return jsonify({
            'success': True,
            'wizard_id': controller.wizard_id,
            'view': controller.view().to_dict()
        })

    except Exception as e:
        logger.error(f"Error loading wizard: {e}")
        return jsonify({
            'success': False,
            'error': str(e)
        }), 500


@app.route('/api/edit', methods=['POST'])
def edit_answer():
    """
    Report one edit.

    JSON body: {"question_id": "...", "value": "..."}
    Multipart: question_id field plus a 'file' upload
    """
    if request.files:
        question_id = request.form.get('question_id')
        value = request.files.get('file')
    else:
        data = request.get_json(silent=True) or {}
        question_id = data.get('question_id')
        value = data.get('value')

    if not question_id:
        return jsonify({
            'success': False,
            'error': 'question_id is required'
        }), 400

    return _run(Edit(question_id=question_id, raw_value=value))


@app.route('/api/next', methods=['POST'])
def next_step():
    return _run(RequestNext())


@app.route('/api/prev', methods=['POST'])
def prev_step():
    return _run(RequestPrev())


@app.route('/api/jump/<int:index>', methods=['POST'])
def jump_to_step(index):
    return _run(RequestJump(target=index))


@app.route('/api/save-exit', methods=['POST'])
def save_and_exit():
    return _run(RequestSaveAndExit())


@app.route('/api/confirm/proceed', methods=['POST'])
def confirm_proceed():
    return _run(ConfirmProceedWithoutSaving())


@app.route('/api/confirm/save', methods=['POST'])
def confirm_save():
    return _run(ConfirmSaveAndProceed())


@app.route('/api/confirm/dismiss', methods=['POST'])
def confirm_dismiss():
    return _run(DismissConfirmation())


@app.route('/api/submit', methods=['POST'])
def submit_wizard():
    return _run(Submit())


if __name__ == '__main__':
    # Ensure output directories exist
    os.makedirs(app.config['DRAFT_DIR'], exist_ok=True)
    os.makedirs(app.config['SUBMISSION_DIR'], exist_ok=True)

    # Start Flask server
    print("\n" + "="*60)
    print("QUESTIONNAIRE WIZARD - WEB API")
    print("="*60)
    print("\nServer starting...")
    print("Wizard state: http://localhost:5000/api/wizard")
    print("\nPress Ctrl+C to stop the server")
    print("="*60 + "\n")

    app.run(debug=True, host='0.0.0.0', port=5000)
