"""Prompts for the issue generation agent."""

import json

from webprod.selection import StructuredRecord

SYSTEM_PROMPT = (
    "あなたはWEB制作プロジェクトの課題管理を支援するAIアシスタントです。"
    "選択された項目のみを使用し、明確で構造化された課題の件名と詳細を生成します。"
)

GENERATION_PROMPT_TEMPLATE = """あなたはWEB制作会社のプロジェクトマネージャーです。以下の選択された項目から、Backlog課題用の「件名」と「詳細」を生成してください。

【生成ルール】
- 件名: 30-60文字、重要キーワードを前方に配置
- 詳細: 見出し + 本文の形式、箇条書き（・）を使用
- 選択されていない項目は絶対に出力しない
- 項目の順序を尊重する
- 空値の項目は省略する
- 日本語で自然な文章にする

【選択された項目】
{{structured_data}}

【出力形式】
JSON形式で以下を出力:
{
  "summary": "件名をここに",
  "description": "詳細をここに（見出しと箇条書き形式）"
}"""


def build_generation_prompt(records: list[StructuredRecord]) -> str:
    """Render the user prompt for a list of projected records."""
    structured_data = json.dumps(
        [record.to_dict() for record in records], ensure_ascii=False, indent=2
    )
    return GENERATION_PROMPT_TEMPLATE.replace("{{structured_data}}", structured_data)
