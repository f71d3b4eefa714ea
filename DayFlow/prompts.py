"""
This file contains all the LLM prompts used in the DayFlow application.
"""

# --- Daily Summary Prompts ---

SUMMARY_REPORT_JSON_SCHEMA = """
{ "summaryReport": "string" }
"""

SUMMARY_REPORT_PROMPT = """
You are an assistant that writes short, insightful summary reports of a person's day.

The day's activity log is given below as a JSON array. Each entry has:
**hour** (0-23), **activity** (free-text description), **category**, and **priority**
('high', 'medium', 'low', or 'Not set').

The report should:
1. Highlight the key activities and the overall time allocation.
2. List up to 5 of the most important tasks of the day. Take 'high' priority tasks first,
   then 'medium', then 'low'. Break ties by whatever looks most impactful.
3. Briefly mention areas for improvement or reflection if the data suggests any.

Write the top tasks as a list, for example:
Key Important Tasks:
- Task 1 (Priority: High)
- Task 2 (Priority: Medium)

Your output MUST be a single JSON object following this schema:
{json_schema}

──────────────────────────────────────────────────────────
Activity log:
{tracking_data}

JSON Output:
"""

# --- Professional Growth Prompts ---

GROWTH_REPORT_JSON_SCHEMA = """
{ "professionalGrowthReport": "string", "improvementSuggestions": "string" }
"""

GROWTH_REPORT_PROMPT = """
You are a career coach and productivity expert.

From the person's daily activity log (JSON array with hour, activity, category, priority) produce:
1. **professionalGrowthReport**: an analysis of work, learning and skill-development activities.
   Point out patterns, strengths, and where more focus would help professional growth.
2. **improvementSuggestions**: 3-5 actionable tips on productivity, time management,
   work-life balance or skill development, written as a bulleted list in one string.

Your output MUST be a single JSON object following this schema:
{json_schema}

──────────────────────────────────────────────────────────
Activity log:
{tracking_data}

JSON Output:
"""

# --- Activity Suggestion Prompts ---

SUGGESTIONS_JSON_SCHEMA = """
{ "suggestions": ["string"] }
"""

SUGGEST_ACTIVITY_PROMPT = """
You are helping someone log what they did during one hour of their day.
Based on what they have typed so far, offer 3-5 short, relevant completions of the activity description.
{hour_context}
Current input: "{current_input}"

Example for "Meeting with":
{{ "suggestions": ["Meeting with John", "Meeting with marketing team", "Meeting to discuss project X"] }}

Your output MUST be a single JSON object following this schema:
{json_schema}

JSON Output:
"""

SUGGEST_HOUR_CONTEXT = "Hour of the day: {hour}:00. Activities at 08:00 usually differ from those at 20:00.\n"
