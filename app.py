import os
from stkpay import create_app
from stkpay.extensions import db

app = create_app(os.getenv('FLASK_ENV', 'development'))

@app.shell_context_processor
def make_shell_context():
    from stkpay.models import Order, PaymentOutcome
    return {
        'db': db,
        'Order': Order,
        'PaymentOutcome': PaymentOutcome
    }

if __name__ == '__main__':
    app.run(debug=True, host='0.0.0.0', port=int(os.getenv('PORT', 5000)))
