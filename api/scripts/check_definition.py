import argparse
import json
import sys
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parents[1]))

from survey_builder.services.rules import required_question_ids, visible_question_ids
from survey_builder.services.serialization import definition_from_json
from survey_builder.services.survey_validation import definition_warnings, validate_survey_definition


def main() -> int:
    parser = argparse.ArgumentParser(description="Validate a survey definition JSON file")
    parser.add_argument("path", type=Path, help="definition document, or a survey record with a 'definition' key")
    parser.add_argument("--answers", type=Path, default=None, help="JSON object of answers to evaluate visibility against")
    args = parser.parse_args()

    doc = json.loads(args.path.read_text(encoding="utf-8"))
    definition = doc.get("definition", doc) if isinstance(doc, dict) else doc

    errors = validate_survey_definition(definition)
    for err in errors:
        print(f"ERROR   {err['path']}: {err['message']} ({err['code']})")
    if errors:
        return 1

    for warning in definition_warnings(definition):
        print(f"WARNING {warning['path']}: {warning['message']} ({warning['code']})")

    questions = definition_from_json(definition)
    print(f"Definition OK: {len(questions)} question(s)")

    if args.answers:
        answers = json.loads(args.answers.read_text(encoding="utf-8"))
        print(f"- visible: {visible_question_ids(questions, answers)}")
        print(f"- required: {required_question_ids(questions, answers)}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
