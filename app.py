"""
Learner Profile Service - onboarding personality scoring and profile narratives
Flask backend serving the questionnaire, trait scores, and embedding-ready learner narratives
"""

from flask import Flask, request, jsonify
from flask_caching import Cache
from datetime import datetime
import os
import logging
from dotenv import load_dotenv

from embedding_client import (
    DEFAULT_EMBEDDING_DIMENSIONS,
    DEFAULT_EMBEDDING_MODEL,
    EmbeddingError,
    GeminiEmbeddingClient,
)
from personality_questionnaire import PersonalityQuestionnaire
from preferences_service import (
    embed_profile_narrative,
    prepare_preferences_update,
    reembed_profiles,
)
from profile_narrative import construct_user_profile_string

# ============================================================================
# LOAD ENV & CREATE FLASK APP FIRST
# ============================================================================

load_dotenv()

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

app = Flask(__name__)
app.config['SECRET_KEY'] = os.getenv('SECRET_KEY', 'learner-profile-secret')

# ============================================================================
# CONFIGURATION
# ============================================================================

GEMINI_API_KEY = os.getenv('GEMINI_API_KEY')
EMBEDDING_MODEL = os.getenv('EMBEDDING_MODEL', DEFAULT_EMBEDDING_MODEL)
EMBEDDING_DIMENSIONS = int(os.getenv('EMBEDDING_DIMENSIONS', DEFAULT_EMBEDDING_DIMENSIONS))
EMBEDDING_TIMEOUT = float(os.getenv('EMBEDDING_TIMEOUT', 10))
CACHE_TIMEOUT = int(os.getenv('CACHE_TIMEOUT', 3600))  # 1 hour

cache = Cache(config={'CACHE_TYPE': 'SimpleCache', 'CACHE_DEFAULT_TIMEOUT': CACHE_TIMEOUT})
cache.init_app(app)

embedding_client = None
if GEMINI_API_KEY:
    embedding_client = GeminiEmbeddingClient(
        GEMINI_API_KEY,
        model=EMBEDDING_MODEL,
        dimensions=EMBEDDING_DIMENSIONS,
        timeout=EMBEDDING_TIMEOUT,
    )
    logger.info("✓ Embedding client initialized (%s, %s dims)", EMBEDDING_MODEL, EMBEDDING_DIMENSIONS)
else:
    logger.info("⚠ GEMINI_API_KEY not set - profiles will be saved without embeddings")

personality_questionnaire = PersonalityQuestionnaire()

# ============================================================================
# DATA STRUCTURES
# ============================================================================

# In-memory storage: user_id -> preference record
user_preferences = {}


@cache.memoize(timeout=CACHE_TIMEOUT)
def embed_narrative(narrative):
    """Embed a narrative once per cache window"""
    return embedding_client.embed(narrative)


def _get_embedder():
    return embed_narrative if embedding_client else None


def _preference_record(user_id):
    return user_preferences.setdefault(user_id, {
        'user_id': user_id,
        'learning': {},
        'narrative': '',
        'embedding': None,
        'updated_at': None,
    })

# ============================================================================
# PERSONALITY ASSESSMENT ROUTES
# ============================================================================

@app.route('/api/personality/questions', methods=['GET'])
def get_personality_questions():
    """Return the onboarding questionnaire"""
    questions = personality_questionnaire.get_all_questions()
    return jsonify({
        'status': 'success',
        'questions': questions,
        'total': len(questions),
        'estimated_time_minutes': 3
    })


@app.route('/api/personality/submit', methods=['POST'])
def submit_personality_assessment():
    """Score submitted questionnaire responses, optionally storing the profile"""
    data = request.get_json(silent=True) or {}
    user_id = data.get('user_id')
    responses = data.get('responses')

    if not responses:
        return jsonify({'error': 'No responses provided'}), 400

    try:
        result = personality_questionnaire.analyze_responses(responses)
    except ValueError as e:
        return jsonify({'error': str(e)}), 400
    except Exception as e:
        logger.exception("Failed to analyze assessment")
        return jsonify({'error': f'Failed to analyze assessment: {e}'}), 500

    if user_id:
        record = _preference_record(user_id)
        record['learning']['personalityProfile'] = result['personality_profile']
        record['narrative'] = construct_user_profile_string(record['learning'])
        record['embedding'] = embed_profile_narrative(record['narrative'], _get_embedder())
        record['updated_at'] = datetime.now().isoformat()

    return jsonify({
        'status': 'success',
        'personality_profile': result['personality_profile'],
        'summary': result['summary'],
        'timestamp': result['timestamp']
    })

# ============================================================================
# LEARNING PREFERENCES ROUTES
# ============================================================================

@app.route('/api/preferences', methods=['POST'])
def save_preferences():
    """Validate and store learning preferences, regenerating the profile embedding"""
    data = request.get_json(silent=True) or {}
    user_id = data.get('user_id')
    if not user_id:
        return jsonify({'error': 'user_id is required'}), 400

    try:
        update = prepare_preferences_update(data, embedder=_get_embedder())
    except ValueError as e:
        return jsonify({'error': str(e)}), 400

    record = _preference_record(user_id)
    record['learning'] = update['learning']
    record['narrative'] = update['narrative']
    record['embedding'] = update['embedding']
    record['updated_at'] = datetime.now().isoformat()

    logger.info("✓ Saved preferences for %s", user_id)
    return jsonify({
        'status': 'success',
        'message': 'Preferences saved successfully',
        'preferences': record['learning'],
        'narrative': record['narrative'],
        'embedded': update['embedding'] is not None
    })


@app.route('/api/preferences/<user_id>', methods=['GET'])
def get_preferences(user_id):
    """Return the stored preference record"""
    record = user_preferences.get(user_id)
    if not record:
        return jsonify({'error': 'User not found'}), 404

    return jsonify({
        'status': 'success',
        'preferences': record['learning'],
        'narrative': record['narrative'],
        'has_embedding': record['embedding'] is not None,
        'updated_at': record['updated_at']
    })


@app.route('/api/preferences/narrative', methods=['POST'])
def preview_narrative():
    """Render the learner narrative for any (partial) preference payload"""
    data = request.get_json(silent=True)
    narrative = construct_user_profile_string(data if isinstance(data, dict) else {})
    return jsonify({'status': 'success', 'narrative': narrative})


@app.route('/api/preferences/reembed', methods=['POST'])
def reembed_all_preferences():
    """Rebuild every stored narrative and re-embed them in one batch"""
    if not embedding_client:
        return jsonify({'error': 'Embedding service not configured'}), 503

    try:
        embedded = reembed_profiles(user_preferences, embedding_client.embed_batch)
    except EmbeddingError as e:
        logger.error(f"❌ Bulk re-embedding failed: {e}")
        return jsonify({'error': str(e)}), 502

    now = datetime.now().isoformat()
    for record in user_preferences.values():
        record['updated_at'] = now

    return jsonify({
        'status': 'success',
        'embedded': embedded,
        'total': len(user_preferences)
    })


@app.route('/api/health', methods=['GET'])
def health():
    """Health check endpoint"""
    return jsonify({
        'status': 'healthy',
        'version': '1.0.0',
        'stored_profiles': len(user_preferences),
        'personality_assessment': 'active',
        'embedding_configured': embedding_client is not None,
        'embedding_model': EMBEDDING_MODEL if embedding_client else None
    })

# ============================================================================
# ERROR HANDLING
# ============================================================================

@app.errorhandler(404)
def not_found(error):
    return jsonify({'error': 'Endpoint not found'}), 404

@app.errorhandler(500)
def internal_error(error):
    return jsonify({'error': 'Internal server error'}), 500

# ============================================================================
# MAIN
# ============================================================================

if __name__ == '__main__':
    print("""
╔═══════════════════════════════════════════════════════════╗
║         LEARNER PROFILE SERVICE v1.0                      ║
║  ✓ Psychometric Trait Scoring                             ║
║  ✓ Learner Narrative Builder                              ║
║  ✓ Gemini Profile Embeddings                              ║
╚═══════════════════════════════════════════════════════════╝
    """)

    port = int(os.environ.get('PORT', 5000))
    debug_mode = os.environ.get('FLASK_DEBUG', 'false').lower() == 'true'
    app.run(debug=debug_mode, host='0.0.0.0', port=port)
