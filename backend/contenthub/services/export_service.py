"""問卷と回答のエクスポート (PDF / CSV)"""
import csv
import io
from fpdf import FPDF
from fpdf.enums import XPos, YPos

from contenthub.models.wenjuan import Wenjuan, WenjuanAnswer
from contenthub.core.config import settings
from contenthub.core.logging import get_logger
from contenthub.core.timeutils import isoformat
from contenthub.services.wenjuan_service import parse_answers, parse_questions
from contenthub.core.exceptions import ValidationFailedError

logger = get_logger(__name__)

PDF_FONT_FAMILY = "contenthub"
CORE_FONT_FAMILY = "helvetica"


def _answer_values(answer: WenjuanAnswer, question_count: int) -> list[str]:
    """回答をJSON配列として読む。壊れた値は1列目にそのまま入れる"""
    try:
        values = parse_answers(answer.answer)
    except ValidationFailedError:
        values = [answer.answer]
    values = values[:question_count]
    return values + [""] * (question_count - len(values))


class _SurveyPDF:
    def __init__(self):
        self.pdf = FPDF(orientation="P", unit="mm", format="A4")
        self.pdf.set_auto_page_break(auto=True, margin=15)
        if settings.PDF_FONT_PATH:
            self.pdf.add_font(PDF_FONT_FAMILY, fname=settings.PDF_FONT_PATH)
            self.family = PDF_FONT_FAMILY
            self.unicode = True
        else:
            self.family = CORE_FONT_FAMILY
            self.unicode = False

    def _text(self, text: str) -> str:
        # コアフォントは Latin-1 のみ
        if self.unicode:
            return text
        return text.encode("latin-1", "replace").decode("latin-1")

    def heading(self, text: str, size: int):
        # TTFは太字を持たないので通常体で大きさだけ変える
        self.pdf.set_font(self.family, "" if self.unicode else "B", size)
        self.pdf.cell(0, 10, self._text(text), new_x=XPos.LMARGIN, new_y=YPos.NEXT)

    def line(self, text: str):
        self.pdf.set_font(self.family, "", 11)
        self.pdf.multi_cell(0, 7, self._text(text), new_x=XPos.LMARGIN, new_y=YPos.NEXT)

    def output(self) -> bytes:
        return bytes(self.pdf.output())


def export_pdf(wenjuan: Wenjuan, answers: list[WenjuanAnswer]) -> bytes:
    questions = parse_questions(wenjuan.content)
    doc = _SurveyPDF()
    doc.pdf.set_title(doc._text(wenjuan.title))
    doc.pdf.add_page()

    doc.heading("Questionnaire", 16)
    doc.line(f"Title: {wenjuan.title.strip() or 'Untitled'}")
    doc.line(f"Status: {wenjuan.status}")
    if wenjuan.deadline:
        doc.line(f"Deadline: {isoformat(wenjuan.deadline)}")
    doc.line(f"Created At: {isoformat(wenjuan.created_at)}")
    doc.pdf.ln(4)

    doc.heading("Questions", 14)
    for i, q in enumerate(questions, start=1):
        doc.line(f"Q{i}. {q}")
    doc.pdf.ln(4)

    doc.heading(f"Answers ({len(answers)})", 14)
    for answer in answers:
        doc.line(f"#{answer.id}  {answer.user_email}  {isoformat(answer.created_at)}")
        for i, value in enumerate(_answer_values(answer, len(questions)), start=1):
            doc.line(f"  Q{i}: {value or '-'}")
        doc.pdf.ln(2)

    data = doc.output()
    logger.info(f"PDF出力: wenjuan_id={wenjuan.id}, answers={len(answers)}, bytes={len(data)}")
    return data


def export_csv(wenjuan: Wenjuan, answers: list[WenjuanAnswer]) -> bytes:
    """ID, 回答者, 質問ごとの列, 回答日時。Excelで開けるようBOM付きUTF-8"""
    questions = parse_questions(wenjuan.content)
    buf = io.StringIO()
    writer = csv.writer(buf)
    writer.writerow(["ID", "respondent", *questions, "created_at"])
    for answer in answers:
        writer.writerow([
            answer.id,
            answer.user_email,
            *_answer_values(answer, len(questions)),
            isoformat(answer.created_at),
        ])
    logger.info(f"CSV出力: wenjuan_id={wenjuan.id}, answers={len(answers)}")
    return buf.getvalue().encode("utf-8-sig")
