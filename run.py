import os

from dotenv import load_dotenv

from barbearia import create_app, db

# Carrega variáveis de ambiente do .env se existir
load_dotenv()

app = create_app(os.getenv('FLASK_CONFIG') or 'default')


@app.shell_context_processor
def make_shell_context():
    """Permite acesso fácil ao db no 'flask shell'."""
    return dict(db=db)


if __name__ == '__main__':
    app.run(debug=True)
