# -*- coding: utf-8 -*-
# =============================================================================
# Katalon WebUI Groovy 렌더러
#
# - 액션 이름 -> Groovy 한 줄(또는 몇 줄) 템플릿
# - 오브젝트 이름은 명사를 PascalCase로 이어 붙이고 "Element"를 붙인다.
#   명사가 없으면 "element"
# - 상태 단어가 있으면 WebUI.comment로 상태 확인 줄을 덧붙인다.
# - 템플릿이 없는 액션은 WebUI.comment 자리표시로 남긴다.
# =============================================================================

from typing import Callable, Dict, List, Optional

from .base import BaseRenderer, RenderContext

# -----------------------------------------------------------------------------
# [Dynamic] 조합 카탈로그의 시간/셀렉터 단어 해석
# -----------------------------------------------------------------------------
DELAY_RULES = (
    (("빠른", "즉시", "바로"), 100),
    (("곧", "잠깐"), 500),
    (("잠시", "조금"), 1000),
    (("나중", "천천히"), 3000),
    (("많이", "오래"), 5000),
)
DEFAULT_DELAY_MS = 1000

def dynamic_delay_ms(word: str) -> int:
    """시간 관념 단어 -> 지연(ms)."""
    for keys, ms in DELAY_RULES:
        if any(k in (word or "") for k in keys):
            return ms
    return DEFAULT_DELAY_MS

def dynamic_selector(word: str, action: Optional[str] = None) -> str:
    """요소/위치 단어 (+ 액션) -> CSS 셀렉터 추정."""
    word = word or ""
    act = (action or "").lower()

    if "click" in act:
        if "버튼" in word:
            return "button, [type='button'], .btn"
        if "링크" in word:
            return "a, [href]"
        if "아이콘" in word:
            return ".icon, [class*='icon'], svg"
    if "set text" in act:
        if "비밀번호" in word:
            return "input[type='password']"
        if "이메일" in word:
            return "input[type='email']"
        return "input, textarea"
    if "select" in act:
        return "select, [role='combobox']"

    if "첫" in word or "앞" in word:
        return ":first-child"
    if "마지막" in word or "뒤" in word:
        return ":last-child"
    if "위" in word or "상단" in word:
        return "body > :first-child"
    if "아래" in word or "하단" in word:
        return "body > :last-child"
    if "오류" in word or "에러" in word:
        return ".error, [role='alert']"
    if "click" in act:
        return "[role='button'], button, a"
    return "*"

# -----------------------------------------------------------------------------
# [Naming]
# -----------------------------------------------------------------------------
def object_name(nouns: List[str]) -> str:
    if not nouns:
        return "element"
    return "".join(n[:1].upper() + n[1:] for n in nouns) + "Element"

def variable_name(nouns: List[str], fallback: str = "textValue") -> str:
    if not nouns:
        return fallback
    first, rest = nouns[0], nouns[1:]
    return first[:1].lower() + first[1:] + "".join(n[:1].upper() + n[1:] for n in rest)

def _obj(ctx: RenderContext) -> str:
    return f"findTestObject('Object Repository/{object_name(ctx.nouns)}')"

def _quote(text: str) -> str:
    return (text or "").replace("\\", "\\\\").replace("'", "\\'")

def _dquote(text: str) -> str:
    return (text or "").replace("\\", "\\\\").replace('"', '\\"')

def _expected_text(ctx: RenderContext) -> str:
    return ctx.metadata.get("contains") or " ".join(ctx.nouns) or ctx.keyword

# -----------------------------------------------------------------------------
# [Templates] 액션별 Groovy
# -----------------------------------------------------------------------------
def _get_text(ctx):
    var = variable_name(ctx.nouns)
    return f"def {var} = WebUI.getText({_obj(ctx)})"

def _get_attribute(ctx):
    attr = ctx.metadata.get("attribute", "value")
    var = variable_name(ctx.nouns, "attributeValue")
    return (
        f"def {var} = WebUI.getAttribute({_obj(ctx)}, '{_quote(attr)}')\n"
        f"WebUI.verifyMatch({var}, '{_quote(ctx.metadata.get('value', 'expected_value'))}', false)"
    )

def _delay(ctx):
    ms = dynamic_delay_ms(ctx.metadata.get("duration_word", ctx.keyword))
    return f"WebUI.delay({max(1, round(ms / 1000))}) // {ms}ms"

def _scroll(ctx):
    word = ctx.metadata.get("selector_word")
    if word:
        selector = dynamic_selector(word, "Scroll To Element")
        return f"WebUI.executeJavaScript(\"document.querySelector(\\\"{selector}\\\").scrollIntoView()\", null)"
    return f"WebUI.scrollToElement({_obj(ctx)}, 5)"

def _verify_present(ctx):
    word = ctx.metadata.get("duration_word")
    timeout = max(1, round(dynamic_delay_ms(word) / 1000)) if word else 10
    return f"WebUI.verifyElementPresent({_obj(ctx)}, {timeout})"

TEMPLATES: Dict[str, Callable[[RenderContext], str]] = {
    # 클릭 / 마우스
    "Click": lambda c: f"WebUI.click({_obj(c)})",
    "Double Click": lambda c: f"WebUI.doubleClick({_obj(c)})",
    "Right Click": lambda c: f"WebUI.rightClick({_obj(c)})",
    "Mouse Over": lambda c: f"WebUI.mouseOver({_obj(c)})",
    "Drag And Drop": lambda c: (
        f"WebUI.dragAndDropToObject({_obj(c)}, findTestObject('Object Repository/targetElement'))"
    ),
    "Scroll To Element": _scroll,
    "Submit": lambda c: f"WebUI.submit({_obj(c)})",
    # 입력
    "Set Text": lambda c: f"WebUI.setText({_obj(c)}, 'input_text')",
    "Set Encrypted Text": lambda c: f"WebUI.setEncryptedText({_obj(c)}, 'encrypted_password')",
    "Clear Text": lambda c: f"WebUI.clearText({_obj(c)})",
    "Upload File": lambda c: f"WebUI.uploadFile({_obj(c)}, '/path/to/file')",
    "Select Option By Label": lambda c: f"WebUI.selectOptionByLabel({_obj(c)}, 'option_label', false)",
    "Select Option By Index": lambda c: f"WebUI.selectOptionByIndex({_obj(c)}, 0)",
    "Check": lambda c: f"WebUI.check({_obj(c)})",
    "Uncheck": lambda c: f"WebUI.uncheck({_obj(c)})",
    # 조회
    "Get Text": _get_text,
    "Get Attribute": _get_attribute,
    "Get CSS Value": lambda c: f"def cssValue = WebUI.getCSSValue({_obj(c)}, 'color')",
    "Get Cookie": lambda c: "def cookies = WebUI.executeJavaScript('return document.cookie', null)",
    "Get Alert Text": lambda c: "def alertText = WebUI.getAlertText()",
    # 검증
    "Verify Element Present": _verify_present,
    "Verify Element Visible": lambda c: f"WebUI.verifyElementVisible({_obj(c)})",
    "Verify Element Clickable": lambda c: f"WebUI.verifyElementClickable({_obj(c)})",
    "Verify Element Text": lambda c: f"WebUI.verifyElementText({_obj(c)}, '{_quote(_expected_text(c))}')",
    "Verify Element Attribute Value": lambda c: (
        f"WebUI.verifyElementAttributeValue({_obj(c)}, "
        f"'{_quote(c.metadata.get('attribute', 'value'))}', '{_quote(c.metadata.get('value', 'expected_value'))}', 30)"
    ),
    "Verify Element Not Present": lambda c: f"WebUI.verifyElementNotPresent({_obj(c)}, 5)",
    "Verify Element Not Visible": lambda c: f"WebUI.verifyElementNotVisible({_obj(c)})",
    "Verify Element Not Clickable": lambda c: f"WebUI.verifyElementNotClickable({_obj(c)})",
    "Verify Element Not Enabled": lambda c: f"WebUI.verifyElementNotClickable({_obj(c)}) // disabled",
    "Verify Element Not Selected": lambda c: f"WebUI.verifyElementNotChecked({_obj(c)}, 5)",
    "Verify Element Read Only": lambda c: f"WebUI.verifyElementHasAttribute({_obj(c)}, 'readonly', 5)",
    # 대기
    "Delay": _delay,
    "Wait For Element Present": lambda c: f"WebUI.waitForElementPresent({_obj(c)}, 10)",
    "Wait For Element Not Present": lambda c: f"WebUI.waitForElementNotPresent({_obj(c)}, 10)",
    "Wait For Element Visible": lambda c: f"WebUI.waitForElementVisible({_obj(c)}, 10)",
    # 이동 / 창
    "Navigate To Url": lambda c: "WebUI.navigateToUrl('https://example.com')",
    "Back": lambda c: "WebUI.back()",
    "Forward": lambda c: "WebUI.forward()",
    "Refresh": lambda c: "WebUI.refresh()",
    "Switch To Window": lambda c: "WebUI.switchToWindowTitle('window_title')",
    "Switch To Window Index": lambda c: "WebUI.switchToWindowIndex(1)",
    "Switch To Frame": lambda c: f"WebUI.switchToFrame({_obj(c)}, 5)",
    "Accept Alert": lambda c: "WebUI.acceptAlert()",
    # 스크립트
    "Execute JavaScript": lambda c: (
        f"WebUI.executeJavaScript('// {_quote(' '.join(c.nouns + c.verbs) or c.keyword)} 처리 로직', null)"
    ),
}


class KatalonGroovyRenderer(BaseRenderer):
    name = "katalon"

    def supports(self, action: str) -> bool:
        return action in TEMPLATES

    def render(self, action: str, context: RenderContext) -> str:
        template = TEMPLATES.get(action)
        if template is None:
            code = f'WebUI.comment("{_dquote(action)}: {_dquote(context.keyword)}")'
        else:
            code = template(context)

        if context.states:
            code += f'\nWebUI.comment("{_dquote(" ".join(context.states))} 상태 확인 완료")'
        return code
