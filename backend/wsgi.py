from promo_basket import create_app

app = create_app()
