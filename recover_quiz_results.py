"""Write the missing result for every completed quiz session that lacks one.

Usage: python recover_quiz_results.py [batch_size]
"""
import sys

from dotenv import load_dotenv

load_dotenv()

from quizflow_app import create_app
from quizflow_app.modules.quiz_session.tasks import run_result_recovery

app = create_app()

if __name__ == '__main__':
    batch_size = int(sys.argv[1]) if len(sys.argv) > 1 else None
    if batch_size:
        app.config['QUIZ_RECOVERY_BATCH_SIZE'] = batch_size

    recovered = run_result_recovery(app)
    if recovered:
        print(f"Recovered {len(recovered)} result(s): {', '.join(str(r) for r in recovered)}")
    else:
        print("No lost results found.")
