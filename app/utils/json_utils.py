# app/utils/json_utils.py
"""
깊이 제한 없는 JSON 직렬화

답글 트리는 깊이에 제한이 없으므로, 표준 json.dumps 처럼 중첩 단계마다 재귀하면
인터프리터 재귀 한도에서 RecursionError 가 발생합니다.
여기서는 명시적 스택으로 컨테이너를 순회하고, 스칼라 값만 표준 인코더에 맡깁니다.
"""
import json
from typing import Any, Callable, Iterator, Optional, Tuple, Union

from flask.json.provider import DefaultJSONProvider

_CHUNK, _VALUE, _LEAVE = 0, 1, 2


def _encode_key(key: Any, encode_scalar: Callable[[Any], str]) -> str:
    # json 모듈과 같은 규칙으로 문자열이 아닌 키를 변환
    if isinstance(key, str):
        return encode_scalar(key)
    if key is True:
        return '"true"'
    if key is False:
        return '"false"'
    if key is None:
        return '"null"'
    if isinstance(key, (int, float)):
        return encode_scalar(encode_scalar(key))
    raise TypeError(f"keys must be str, int, float, bool or None, not {type(key).__name__}")


def iter_encode(obj: Any, *, default: Optional[Callable[[Any], Any]] = None, sort_keys: bool = False,
                ensure_ascii: bool = True, indent: Union[int, str, None] = None,
                separators: Optional[Tuple[str, str]] = None) -> Iterator[str]:
    """obj 를 JSON 텍스트 조각으로 순서대로 생성합니다. 인자 의미는 json.dumps 와 같습니다."""
    if isinstance(indent, int):
        indent = ' ' * indent
    if separators is None:
        separators = (',', ': ') if indent is not None else (', ', ': ')
    item_separator, key_separator = separators
    encode_scalar = json.JSONEncoder(ensure_ascii=ensure_ascii).encode

    def newline(level: int) -> str:
        return '' if indent is None else '\n' + indent * level

    markers = set()
    stack = [(_VALUE, obj, 0)]
    while stack:
        kind, value, level = stack.pop()
        if kind == _CHUNK:
            yield value
            continue
        if kind == _LEAVE:
            markers.discard(value)
            continue

        if value is None or isinstance(value, (str, int, float, bool)):
            yield encode_scalar(value)
            continue

        if isinstance(value, dict):
            items = sorted(value.items()) if sort_keys else list(value.items())
            opening, closing = '{', '}'
        elif isinstance(value, (list, tuple)):
            items = list(value)
            opening, closing = '[', ']'
        else:
            if default is None:
                raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")
            stack.append((_VALUE, default(value), level))
            continue

        if not items:
            yield opening + closing
            continue
        if id(value) in markers:
            raise ValueError("Circular reference detected")
        markers.add(id(value))

        # 닫는 괄호가 가장 나중에 나오도록 역순으로 쌓는다
        pending = [(_LEAVE, id(value), level), (_CHUNK, newline(level) + closing, level)]
        for index in reversed(range(len(items))):
            prefix = (item_separator if index else '') + newline(level + 1)
            if opening == '{':
                key, child = items[index]
                pending.append((_VALUE, child, level + 1))
                pending.append((_CHUNK, prefix + _encode_key(key, encode_scalar) + key_separator, level))
            else:
                pending.append((_VALUE, items[index], level + 1))
                pending.append((_CHUNK, prefix, level))
        stack.extend(pending)
        yield opening


def dumps(obj: Any, **kwargs) -> str:
    return ''.join(iter_encode(obj, **kwargs))


class TreeJSONProvider(DefaultJSONProvider):
    """
    jsonify 응답과 알림 본문을 깊이 제한 없이 직렬화하는 Flask JSON provider.
    기본 provider 의 설정(ensure_ascii, sort_keys, default)은 그대로 따릅니다.
    """

    def dumps(self, obj: Any, **kwargs: Any) -> str:
        kwargs.setdefault("default", self.default)
        kwargs.setdefault("ensure_ascii", self.ensure_ascii)
        kwargs.setdefault("sort_keys", self.sort_keys)
        return dumps(obj, **kwargs)
