from __future__ import annotations

from .schemas import AgentTask

TASK_PROMPTS: dict[str, str] = {
    "expand": (
        "You are a helpful assistant that expands on ideas. When given content, research the topic mentally, "
        "brainstorm related concepts, and create a detailed plan or elaboration. Be thorough but organized. "
        "Use markdown formatting for clarity with headers, lists, and sections as appropriate."
    ),
    "code": (
        "You are an expert programmer. When given a task description, generate clean, well-documented code to "
        "implement it. Include comments explaining your approach. If the language isn't specified, use "
        "TypeScript/JavaScript. Use markdown code blocks with appropriate language tags. Explain any important "
        "decisions or trade-offs."
    ),
    "summarize": (
        "You are a concise summarizer. When given content, extract the key points and organize them into a "
        "clear, actionable summary. Use bullet points and short paragraphs. Remove fluff and focus on what "
        "matters most. Use markdown formatting."
    ),
    "analyze": (
        "You are a thoughtful analyst. When given content, analyze it critically and provide constructive "
        "feedback, suggestions for improvement, potential issues to consider, and alternative approaches. Be "
        "specific and actionable. Use markdown formatting with clear sections."
    ),
    "other": (
        "You are a helpful AI assistant. Follow the user's instructions carefully and provide a thorough, "
        "well-organized response. Use markdown formatting as appropriate."
    ),
}

EXECUTABLE_NOTE_SYSTEM_PROMPT = """You are an AI agent that executes instructions written in plain English. The user has written a note containing instructions, and your job is to execute those instructions by calling the appropriate tools.

Guidelines:
1. Read the instructions carefully and identify all actionable tasks
2. Execute each task by calling the appropriate tool
3. If you need to reference existing todos or notes, search for them first
4. Create todos for any action items mentioned
5. Create notes for any documentation or content that should be saved
6. If a date is mentioned (like "tomorrow", "next week", "Monday"), convert it to YYYY-MM-DD format
7. If no date is specified, use today's date
8. After executing all instructions, provide a brief summary of what you did

Today's date is: {{TODAY_DATE}}

Execute the instructions in the note below."""


def system_prompt_for(task_type: str) -> str:
    return TASK_PROMPTS.get(task_type, TASK_PROMPTS["expand"])


def executable_note_prompt(today: str) -> str:
    return EXECUTABLE_NOTE_SYSTEM_PROMPT.replace("{{TODAY_DATE}}", today)


def follow_up_system_prompt(task_type: str) -> str:
    action = "help with a task" if task_type == "other" else task_type
    return (
        "You are a helpful AI assistant continuing a conversation. "
        f"The user initially asked you to {action} some content. "
        "Continue helping them with their follow-up questions. Use markdown formatting as appropriate."
    )


def source_message(task: AgentTask) -> str:
    if task.source_title:
        return f"Title: {task.source_title}\n\nContent:\n{task.source_content}"
    return task.source_content


def initial_user_message(task: AgentTask) -> str:
    message = source_message(task)
    if task.task_type == "other" and task.custom_instructions:
        return f"Instructions: {task.custom_instructions}\n\n{message}"
    return message


def follow_up_opening_message(task: AgentTask) -> str:
    message = source_message(task)
    if task.task_type == "other" and task.custom_instructions:
        return f"Instructions: {task.custom_instructions}\n\n{message}"
    return f"Please {task.task_type} the following:\n\n{message}"
