from django.urls import path
from . import views

urlpatterns = [
    # Regex -> eNFA -> NFA -> DFA
    path('api/regex-to-automata/', views.regex_to_automata, name='regex_to_automata'),

    # Simulation against the compiled DFA
    path('api/simulate-regex/', views.simulate_regex, name='simulate_regex'),
    path('api/batch-test/', views.batch_test, name='batch_test'),
]
