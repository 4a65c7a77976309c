"""Localized note and label text (``en`` / ``es``).

The locale only ever changes human-readable strings; trace shape and values
are locale independent.
"""

from __future__ import annotations

from . import constants

MESSAGES: dict[str, dict[str, str]] = {
    constants.LOCALE_EN: {
        "true": "true",
        "false": "false",
        "condition": "Condition: {result}",
        "loop_progress": "Loop {name} = {value} ({index}/{total})",
        "loop_value": "Loop {name} = {value}",
        "loop_iteration": "Loop iteration {index}",
        "update_variable": "Update variable",
        "increment": "Increment",
        "decrement": "Decrement",
        "list_assignment": "List assignment",
        "array_declaration": "Array declaration",
        "vector_declaration": "Vector declaration",
        "list_declaration": "List declaration",
        "reduce_assignment": "Assignment (reduce)",
        "string_assignment": "String assignment",
        "assignment": "Assignment",
        "assignment_from_array": "Assignment from array",
        "declaration": "Declaration",
        "declaration_assignment": "Declaration and assignment",
        "declaration_assignment_from_array": "Declaration and assignment from array",
        "output": "Output",
        "execution": "Execution",
        "no_code": "No code",
        "unknown_language": "Unknown language",
        "local_active_lines": "Detected {count} active lines.",
        "local_loops": "There are loops in the flow.",
        "local_no_loops": "No explicit loops found.",
        "local_conditions": "There are conditions affecting execution.",
        "local_no_conditions": "No explicit conditions found.",
        "local_hint": "This is a local summary. Connect a real AI provider for deeper analysis.",
        "incomplete_notice": "Note: the code appears incomplete.",
        "no_question": "No question",
        "answer_incomplete": 'About your question ("{question}"), the current code appears incomplete, so it cannot be fully answered.',
        "answer_basic": 'About your question ("{question}"), the current code allows a basic answer.',
        "answer_summary": "In short, {summary}",
        "answer_step": "On line {index} you can see: {text}.",
        "answer_output": "Output: {output}",
        "no_output": "No output.",
        "ai_default_prompt": "Explain the execution flow.",
        "ai_error": "The AI explanation is not available right now.",
        "ai_rate_limited": "The AI provider is rate limiting requests. Try again in a moment.",
        "ai_insufficient_credits": "The AI provider account has insufficient credits.",
        "ai_system_prompt": (
            "Answer the user question first and clearly, based only on the code. "
            "If it cannot be answered from the code, say so explicitly. Then explain "
            "the code in a smooth, detailed text for someone who does not know "
            "programming. Avoid jargon unless you explain it simply. No lists or "
            "headings, just short paragraphs. Do not invent values; ignore comments; "
            "if something cannot be inferred, say so."
        ),
        "ai_user_message": "User question:\n{prompt}\n\nCode:\n{code}",
    },
    constants.LOCALE_ES: {
        "true": "verdadero",
        "false": "falso",
        "condition": "Condición: {result}",
        "loop_progress": "Bucle {name} = {value} ({index}/{total})",
        "loop_value": "Bucle {name} = {value}",
        "loop_iteration": "Iteración del bucle {index}",
        "update_variable": "Actualiza variable",
        "increment": "Incremento",
        "decrement": "Decremento",
        "list_assignment": "Asignación de lista",
        "array_declaration": "Declaración de array",
        "vector_declaration": "Declaración de vector",
        "list_declaration": "Declaración de lista",
        "reduce_assignment": "Asignación (reduce)",
        "string_assignment": "Asignación de texto",
        "assignment": "Asignación",
        "assignment_from_array": "Asignación desde array",
        "declaration": "Declaración",
        "declaration_assignment": "Declaración y asignación",
        "declaration_assignment_from_array": "Declaración y asignación desde array",
        "output": "Salida",
        "execution": "Ejecución",
        "no_code": "Sin código",
        "unknown_language": "Lenguaje desconocido",
        "local_active_lines": "Detecté {count} líneas activas.",
        "local_loops": "Hay bucles en el flujo.",
        "local_no_loops": "No veo bucles explícitos.",
        "local_conditions": "Hay condiciones que afectan la ejecución.",
        "local_no_conditions": "No veo condiciones explícitas.",
        "local_hint": "Este es un resumen local. Conecta un proveedor IA real para obtener análisis profundo.",
        "incomplete_notice": "Nota: el código parece incompleto.",
        "no_question": "Sin pregunta",
        "answer_incomplete": 'Sobre tu pregunta ("{question}"), el código actual parece incompleto, así que no se puede responder del todo.',
        "answer_basic": 'Sobre tu pregunta ("{question}"), el código actual permite una respuesta básica.',
        "answer_summary": "En resumen, {summary}",
        "answer_step": "En la línea {index} se ve: {text}.",
        "answer_output": "Salida: {output}",
        "no_output": "Sin salida.",
        "ai_default_prompt": "Explica el flujo de ejecución.",
        "ai_error": "La explicación con IA no está disponible ahora.",
        "ai_rate_limited": "El proveedor de IA está limitando las solicitudes. Inténtalo en un momento.",
        "ai_insufficient_credits": "La cuenta del proveedor de IA no tiene créditos suficientes.",
        "ai_system_prompt": (
            "Responde la pregunta del usuario primero y de forma clara, basándote solo "
            "en el código. Si no se puede responder con el código, dilo explícitamente. "
            "Luego explica el código en un texto fluido y detallado, pensado para alguien "
            "que no sabe programar. Evita jerga técnica sin explicarla con palabras "
            "simples. No uses listas ni títulos, solo párrafos breves. No inventes "
            "valores; ignora comentarios; si algo no se puede inferir, dilo."
        ),
        "ai_user_message": "Pregunta del usuario:\n{prompt}\n\nCódigo:\n{code}",
    },
}


def normalize_locale(locale: str) -> str:
    return locale if locale in MESSAGES else constants.DEFAULT_LOCALE


def translate(locale: str, key: str, **kwargs) -> str:
    """Look up *key* for *locale*; unknown keys come back verbatim."""
    template = MESSAGES[normalize_locale(locale)].get(key, key)
    return template.format(**kwargs) if kwargs else template
