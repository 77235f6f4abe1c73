from django.conf import settings
from django.http import JsonResponse
from django.views.decorators.http import require_POST
from django.views.decorators.csrf import csrf_exempt
import json
import logging
from .errors import RegexError
from .fsa_properties import automaton_statistics
from .fsa_simulation import DFASimulator, batch_test as run_batch_test
from .pipeline import compile_regex
from .regex_parsing import postfix_to_string

logger = logging.getLogger(__name__)


def _max_pattern_length():
    return getattr(settings, 'REGEX_MAX_PATTERN_LENGTH', 256)


def _max_batch_size():
    return getattr(settings, 'REGEX_MAX_BATCH_SIZE', 100)


def _max_dfa_states():
    return getattr(settings, 'REGEX_MAX_DFA_STATES', 1000)


def _compile(regex):
    return compile_regex(regex, max_dfa_states=_max_dfa_states())


def _regex_error_response(error):
    return JsonResponse({
        'error': str(error),
        'error_type': type(error).__name__,
        'position': error.position,
    }, status=400)


def _load_json(request):
    """Return (data, error_response); the body must be a JSON object."""
    data = json.loads(request.body)
    if not isinstance(data, dict):
        return None, JsonResponse({'error': 'Request body must be a JSON object'}, status=400)
    return data, None


def _read_regex(data):
    """Return (regex, error_response)."""
    regex = data.get('regex')
    if regex is None:
        return None, JsonResponse({'error': 'Missing regex parameter'}, status=400)
    if not isinstance(regex, str):
        return None, JsonResponse({'error': 'regex must be a string'}, status=400)
    if len(regex) > _max_pattern_length():
        return None, JsonResponse({
            'error': f'Regex longer than {_max_pattern_length()} characters'
        }, status=400)
    return regex, None


@csrf_exempt
@require_POST
def regex_to_automata(request):
    """
    Django view to handle regex -> eNFA -> NFA -> DFA conversion requests.

    Expects a POST request with a JSON body containing:
    - regex: The regular expression to convert.

    Returns a JSON response with all three automata in FSA format, the
    postfix form of the regex and statistics for each stage.
    """
    try:
        data, error_response = _load_json(request)
        if error_response:
            return error_response
        regex, error_response = _read_regex(data)
        if error_response:
            return error_response

        compiled = _compile(regex)

        return JsonResponse({
            'success': True,
            'regex': regex,
            'postfix': postfix_to_string(compiled.postfix),
            'epsilon_nfa': compiled.enfa.to_dict(),
            'nfa': compiled.nfa.to_dict(),
            'dfa': compiled.dfa.to_dict(),
            'statistics': {
                'epsilon_nfa': automaton_statistics(compiled.enfa),
                'nfa': automaton_statistics(compiled.nfa),
                'dfa': automaton_statistics(compiled.dfa),
            },
            'warnings': compiled.warnings,
            'message': 'Regex converted to automata successfully'
        })

    except RegexError as e:
        return _regex_error_response(e)
    except ValueError as e:
        # Includes malformed JSON bodies
        return JsonResponse({'error': str(e)}, status=400)
    except Exception as e:
        logger.exception("Unexpected error converting regex")
        return JsonResponse({'error': f'Server error: {str(e)}'}, status=500)


@csrf_exempt
@require_POST
def simulate_regex(request):
    """
    Django view to step an input string through the DFA of a regex.

    Expects a POST request with a JSON body containing:
    - regex: The regular expression to compile
    - input: The input string to simulate

    Returns the verdict plus one entry per simulator step so the client can
    replay the run.
    """
    try:
        data, error_response = _load_json(request)
        if error_response:
            return error_response
        regex, error_response = _read_regex(data)
        if error_response:
            return error_response
        input_string = data.get('input', '')
        if not isinstance(input_string, str):
            return JsonResponse({'error': 'input must be a string'}, status=400)

        dfa = _compile(regex).dfa
        simulator = DFASimulator(dfa)

        steps = []
        result = simulator.step(input_string)
        steps.append({
            'position': simulator.position,
            'state': dfa.state(simulator.current_state).label,
            'done': result.done,
        })
        while not result.done:
            result = simulator.step(input_string)
            steps.append({
                'position': simulator.position,
                'state': dfa.state(simulator.current_state).label,
                'done': result.done,
            })

        return JsonResponse({
            'accepted': result.accepted,
            'regex': regex,
            'input': input_string,
            'steps': steps,
            'path': simulator.path,
            'rejection_reason': simulator.rejection_reason,
            'rejection_position': None if result.accepted else simulator.position,
        })

    except RegexError as e:
        return _regex_error_response(e)
    except ValueError as e:
        return JsonResponse({'error': str(e)}, status=400)
    except Exception as e:
        logger.exception("Unexpected error simulating regex")
        return JsonResponse({'error': f'Server error: {str(e)}'}, status=500)


@csrf_exempt
@require_POST
def batch_test(request):
    """
    Django view to test many strings against one regex.

    Expects a POST request with a JSON body containing:
    - regex: The regular expression to compile
    - inputs: List of input strings
    """
    try:
        data, error_response = _load_json(request)
        if error_response:
            return error_response
        regex, error_response = _read_regex(data)
        if error_response:
            return error_response

        inputs = data.get('inputs')
        if inputs is None:
            return JsonResponse({'error': 'Missing inputs parameter'}, status=400)
        if not isinstance(inputs, list) or not all(isinstance(s, str) for s in inputs):
            return JsonResponse({'error': 'inputs must be a list of strings'}, status=400)
        if len(inputs) > _max_batch_size():
            return JsonResponse({'error': f'At most {_max_batch_size()} inputs per request'}, status=400)

        results = run_batch_test(_compile(regex).dfa, inputs)
        accepted_count = sum(1 for r in results if r['accepted'])

        return JsonResponse({
            'success': True,
            'regex': regex,
            'results': results,
            'accepted_count': accepted_count,
            'rejected_count': len(results) - accepted_count,
        })

    except RegexError as e:
        return _regex_error_response(e)
    except ValueError as e:
        return JsonResponse({'error': str(e)}, status=400)
    except Exception as e:
        logger.exception("Unexpected error in batch test")
        return JsonResponse({'error': f'Server error: {str(e)}'}, status=500)
