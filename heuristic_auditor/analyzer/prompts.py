"""
Instruction templates for the model calls.

One narrow template per heuristic keeps each call's output small and
reviewable on its own. The shared preamble, filtering rules and output
format are appended around the heuristic-specific focus block.
"""

from typing import Dict

from .heuristics import Heuristic


VISUAL_DECOMPOSITION_PROMPT = """You are a computer vision expert analyzing a website screenshot for a UX evaluation.

TASK: Extract every visible UI element with precise details.

For each element report:
1. type (button, link, input, heading, image, icon, text, logo, menu, alert, ...)
2. text: exact visible text, if any
3. boundingBox: x, y, width, height as PERCENTAGES (0-100) of the screenshot
4. visualProperties: backgroundColor, textColor (hex), fontSize, contrast
5. interactionState: hasHoverState, hasFocusState, isClickable

Pay special attention to navigation menus, form elements (inputs, labels,
validation messages, placeholders), primary and secondary buttons, error
messages and alerts, loading indicators, breadcrumbs, pagination, modals,
overlays, and icons.

VISUAL HIERARCHY: group the elements into exactly these zones:
header, navigation, mainContent, footer, modals.

COLOR PALETTE: list hex colors under primary, secondary, text, background.

CONTRAST AUDIT: for text elements estimate the text/background contrast
ratio and list every pair under 4.5:1 (3:1 for large text) in contrastIssues
with element, foreground, background, ratio and wcagLevel ("AA", "AAA" or "fail").

Return ONLY a JSON object of this shape:
{
  "elements": [{"type": "", "text": "", "boundingBox": {"x": 0, "y": 0, "width": 0, "height": 0},
                "visualProperties": {"backgroundColor": "", "textColor": "", "fontSize": "", "contrast": 0},
                "interactionState": {"hasHoverState": false, "hasFocusState": false, "isClickable": false}}],
  "visualHierarchy": {"header": [], "navigation": [], "mainContent": [], "footer": [], "modals": []},
  "colorPalette": {"primary": [], "secondary": [], "text": [], "background": []},
  "contrastIssues": [{"element": "", "foreground": "", "background": "", "ratio": 0, "wcagLevel": "fail"}]
}"""


EVALUATOR_PREAMBLE = (
    "You are a UX evaluation expert trained in the Nielsen Norman Group "
    "heuristic evaluation methodology. Evaluate ONLY the heuristic below."
)


HEURISTIC_PROMPTS: Dict[Heuristic, str] = {
    Heuristic.VISIBILITY: """# HEURISTIC #1: Visibility of System Status

Focus on USER-PERCEIVABLE feedback, not technical implementation.

IN SCOPE:
- Do users know what the system is doing right now?
- Are loading, progress and status changes visible?
- Do interactive elements show their state (hover, active, disabled)?
- Is the current page marked in the navigation?

OUT OF SCOPE: meta tags, code structure, performance metrics, SEO.

EXAMPLE VIOLATIONS:
- A form submits with no confirmation, so users cannot tell whether it worked.
- Buttons show no hover state, so users cannot tell they are clickable.
- A long operation has no progress indicator.

CITE: NN/g response-time limits (0.1s / 1s / 10s); Baymard findings on progress indicators.""",

    Heuristic.MATCH_REAL_WORLD: """# HEURISTIC #2: Match Between System and the Real World

Focus on LANGUAGE and METAPHORS users recognize, not code quality.

IN SCOPE:
- Do icons and labels match expectations (trash = delete, magnifier = search)?
- Is the wording plain language rather than internal jargon?
- Do visual metaphors make sense for the content they represent?

OUT OF SCOPE: HTML semantics, naming in code, metadata.

EXAMPLE VIOLATIONS:
- "Terminate session" instead of "Log out".
- Unfamiliar icons with no text label.
- A cart labelled "Purchase container".

CITE: Jakob's Law; NN/g research on unfamiliar patterns and cognitive load.""",

    Heuristic.USER_CONTROL: """# HEURISTIC #3: User Control and Freedom

Focus on ESCAPE ROUTES and UNDO, not missing features.

IN SCOPE:
- Can users cancel, go back, or close dialogs easily?
- Is there undo or confirmation for destructive actions?
- Can users leave a multi-step flow midway?

OUT OF SCOPE: browser back-button mechanics, code architecture.

EXAMPLE VIOLATIONS:
- A modal without a visible close control traps the user.
- A destructive action happens immediately with no undo.
- A multi-step form has no back button.

CITE: NN/g guidance on emergency exits; Baymard checkout abandonment research.""",

    Heuristic.CONSISTENCY: """# HEURISTIC #4: Consistency and Standards

Focus on VISUAL and BEHAVIORAL consistency users can see.

IN SCOPE:
- Do similar elements look and behave the same?
- Is the same action labelled the same way everywhere?
- Are button styles, colors and spacing consistent?
- Does the page follow common web conventions (logo top-left links home, etc.)?

OUT OF SCOPE: code consistency, HTML validation, framework choice.

EXAMPLE VIOLATIONS:
- Primary buttons are blue in one section and red in another.
- "Submit" on one form, "Send" on the next.
- Navigation moves between sections.

CITE: NN/g research on internal/external consistency; Fitts's Law for consistent placement.""",

    Heuristic.ERROR_PREVENTION: """# HEURISTIC #5: Error Prevention

Focus on PREVENTING user mistakes before they happen.

IN SCOPE:
- Does the design steer users away from errors?
- Are dangerous actions confirmed?
- Does inline validation, constrained input or a format hint stop bad input?

OUT OF SCOPE: code-level error handling, browser compatibility, missing HTML attributes.

EXAMPLE VIOLATIONS:
- A delete button with no confirmation.
- A password field with no strength or rule hints.
- A date typed as free text instead of a picker or format hint.

CITE: Baymard inline validation research; NN/g on slips versus mistakes.""",

    Heuristic.RECOGNITION: """# HEURISTIC #6: Recognition Rather Than Recall

Focus on MEMORY BURDEN placed on users.

IN SCOPE:
- Are options visible rather than remembered?
- Do forms show format examples and persistent labels?
- Is navigation visible rather than hidden?

OUT OF SCOPE: SEO descriptions, alt text, technical documentation.

EXAMPLE VIOLATIONS:
- Placeholder-only labels that disappear while typing.
- Search without suggestions for a large catalogue.
- Key categories hidden behind an unlabeled icon.

CITE: Miller's working-memory limits; NN/g recognition versus recall research.""",

    Heuristic.FLEXIBILITY: """# HEURISTIC #7: Flexibility and Efficiency of Use

Focus on ACCELERATORS for frequent and expert users, not responsive design.

IN SCOPE:
- Are there shortcuts, quick links, or bulk actions for frequent tasks?
- Can users search, filter or sort long content?
- Are defaults and personalization available?

OUT OF SCOPE: viewport meta tags, cross-browser support, performance tuning.

EXAMPLE VIOLATIONS:
- A long list without search or filters.
- No quick access to the most common task from the landing page.
- Repetitive steps with no saved preferences.

CITE: NN/g research on accelerators; Fitts's Law.""",

    Heuristic.MINIMALIST: """# HEURISTIC #8: Aesthetic and Minimalist Design

Focus on VISUAL CLUTTER and focus, not code size.

IN SCOPE:
- Is the layout cluttered or clean?
- Does secondary content compete with the primary task?
- Is there a clear visual hierarchy and enough white space?

OUT OF SCOPE: file size, DOM node count, SEO.

EXAMPLE VIOLATIONS:
- Many competing calls to action above the fold.
- Decorative elements crowding a form.
- Dense text blocks without hierarchy.

CITE: Hick's Law; NN/g research on signal-to-noise in interfaces.""",

    Heuristic.ERROR_RECOVERY: """# HEURISTIC #9: Help Users Recognize, Diagnose, and Recover from Errors

Focus on USER-FACING error messages.

IN SCOPE:
- Are error messages written in plain language?
- Do they say what went wrong and how to fix it?
- Are they visible and placed near the problem?

OUT OF SCOPE: console errors, server error codes, missing validation attributes.

EXAMPLE VIOLATIONS:
- "Error 422" instead of "Please enter a valid email address".
- "Something went wrong" with no next step.
- Error text shown far from the field that caused it.

CITE: NN/g error-message guidelines; Baymard form error research.""",

    Heuristic.HELP_DOCUMENTATION: """# HEURISTIC #10: Help and Documentation

Focus on USER-ACCESSIBLE help at the moment it is needed.

IN SCOPE:
- Is help (FAQ, support, contact, tooltips) easy to find?
- Is complex functionality explained in context?
- Are confusing elements accompanied by hints?

OUT OF SCOPE: developer documentation, API docs, meta descriptions, alt text.

EXAMPLE VIOLATIONS:
- Complex settings with no tooltips or help links.
- No visible FAQ, help or contact entry point.
- Jargon-heavy features with no explanation.

CITE: NN/g research on contextual help and support deflection.""",
}


FILTERING_RULES = """DO NOT REPORT as heuristic violations:
1. Missing HTML meta tags (viewport, charset, description)
2. Missing alt attributes (accessibility audit, not heuristics)
3. Code quality or implementation issues
4. SEO, performance or load time
5. Browser compatibility
6. Missing semantic tags, CSS or JavaScript issues

ONLY REPORT:
1. Design patterns users can see and that affect their experience
2. Interaction problems users actually encounter
3. Visual design problems that cause confusion
4. Information architecture that hinders task completion

Every violation MUST name a concrete visible element, give a specific title
of 6-10 words, include a boundingBox in percentages for anything visible in
the screenshot, a specific research citation, and a quantified user impact."""


OUTPUT_FORMAT = """Return ONLY a JSON object of this shape:
{
  "violations": [{
    "severity": "high|medium|low",
    "title": "User-facing issue in 6-10 words",
    "description": "Why this violates THIS heuristic, with visible evidence",
    "location": "Precise visual location on the page",
    "recommendation": "Design change that fixes it",
    "pageElement": "The visible UI element",
    "boundingBox": {"x": 0, "y": 0, "width": 0, "height": 0},
    "researchBacking": "Specific NN/g or Baymard finding",
    "userImpact": "Quantified effect on users"
  }],
  "strengths": [{
    "description": "Design pattern done well for THIS heuristic",
    "example": "Specific visible example from the page"
  }]
}
Return empty arrays when there is nothing to report."""


def build_heuristic_instruction(heuristic: Heuristic, context: str) -> str:
    """
    Assemble the full instruction for one heuristic.

    Args:
        heuristic: Heuristic to evaluate
        context: Evidence block (visual, structural, content, patterns)

    Returns:
        Instruction text
    """
    sections = [
        EVALUATOR_PREAMBLE,
        HEURISTIC_PROMPTS[heuristic],
        FILTERING_RULES,
        "EVIDENCE PROVIDED\n\n" + context,
        OUTPUT_FORMAT,
    ]
    return "\n\n".join(sections)
