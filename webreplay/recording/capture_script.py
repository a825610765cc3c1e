"""JavaScript generator for the interaction capture listeners.

The generated script is installed on every new document of the recorded
page. It pushes flat interaction records into a ``window`` buffer that the
recorder drains periodically.
"""

import json
from dataclasses import dataclass, field


@dataclass
class CaptureConfig:
    """Configuration for the capture script."""

    # Name of the window buffer the recorder drains
    buffer_name: str = "__webreplayInteractions"

    # Truncation of captured strings
    max_text_length: int = 100
    max_value_length: int = 100

    # DOM events to listen for (capture phase)
    events: list[str] = field(default_factory=lambda: ["click", "input", "change", "submit"])

    # Values of these input types are never captured
    masked_input_types: list[str] = field(default_factory=lambda: ["password"])


# element.type values that become the interaction kind of input/change events
_TYPED_KINDS = ["text", "search", "checkbox", "range", "select-one"]


class CaptureScriptGenerator:
    """Generates the DOM listener script used by the recorder.

    Example:
        generator = CaptureScriptGenerator()
        await page.add_init_script(generator.generate())
        drained = await page.evaluate(generator.drain_expression())
    """

    def __init__(self, config: CaptureConfig | None = None):
        self.config = config or CaptureConfig()

    def drain_expression(self) -> str:
        """Expression that returns and empties the page buffer in one step."""
        buffer = json.dumps(self.config.buffer_name)
        return f"() => {{ const b = window[{buffer}] || []; window[{buffer}] = []; return b; }}"

    def generate(self) -> str:
        """Generate the listener script."""
        config = self.config
        buffer = json.dumps(config.buffer_name)
        events = json.dumps(config.events)
        masked = json.dumps(config.masked_input_types)
        typed_kinds = json.dumps(_TYPED_KINDS)

        return f'''(() => {{
  const BUFFER = {buffer};
  if (window[BUFFER + "Installed"]) return;
  window[BUFFER + "Installed"] = true;
  window[BUFFER] = window[BUFFER] || [];

  const EVENTS = {events};
  const MASKED = {masked};
  const TYPED_KINDS = {typed_kinds};

  function truncate(value, max) {{
    if (value === undefined || value === null) return null;
    return String(value).substring(0, max);
  }}

  function getSelector(element) {{
    if (element.id) return "#" + element.id;
    if (element.name) return '[name="' + element.name + '"]';

    let selector = element.tagName.toLowerCase();
    if (typeof element.className === "string" && element.className.trim()) {{
      selector += "." + element.className.trim().split(/\\s+/).join(".");
    }}

    const parent = element.parentElement;
    if (parent && parent !== document.body) {{
      const siblings = Array.from(parent.children).filter(
        (child) => child.tagName === element.tagName
      );
      if (siblings.length > 1) {{
        selector += ":nth-of-type(" + (siblings.indexOf(element) + 1) + ")";
      }}
    }}
    return selector;
  }}

  function describe(element) {{
    return {{
      tagName: element.tagName || null,
      id: element.id || null,
      className: typeof element.className === "string" ? (element.className || null) : null,
      name: element.name || null,
      selector: getSelector(element)
    }};
  }}

  function record(kind, data) {{
    window[BUFFER].push(Object.assign({{
      type: kind,
      timestamp: Date.now(),
      url: window.location.href
    }}, data));
  }}

  function valueOf(element) {{
    if (MASKED.indexOf(element.type) !== -1) return null;
    return truncate(element.value, {config.max_value_length});
  }}

  function kindFor(element, fallback) {{
    return TYPED_KINDS.indexOf(element.type) !== -1 ? element.type : fallback;
  }}

  const handlers = {{
    click: (event) => {{
      const element = event.target;
      record("click", Object.assign(describe(element), {{
        text: element.textContent ? truncate(element.textContent.trim(), {config.max_text_length}) : null,
        href: element.href || null,
        coordinates: {{ x: event.clientX, y: event.clientY }}
      }}));
    }},
    input: (event) => {{
      const element = event.target;
      if (element.type === "checkbox" || element.type === "radio") return;
      record(kindFor(element, "input"), Object.assign(describe(element), {{
        inputType: element.type || null,
        value: valueOf(element)
      }}));
    }},
    change: (event) => {{
      const element = event.target;
      record(kindFor(element, "change"), Object.assign(describe(element), {{
        inputType: element.type || null,
        value: valueOf(element),
        checked: typeof element.checked === "boolean" ? element.checked : null
      }}));
    }},
    submit: (event) => {{
      const element = event.target;
      record("submit", Object.assign(describe(element), {{
        action: element.action || null,
        method: element.method || null
      }}));
    }}
  }};

  EVENTS.forEach((name) => {{
    if (handlers[name]) document.addEventListener(name, handlers[name], true);
  }});
}})();'''
