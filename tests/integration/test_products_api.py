"""
Integration tests for the catalog API (products and categories).
"""

import io
import os

from pos_app.models import Product


def _image(name='fw.png', data=b'\x89PNG rocket'):
    return (io.BytesIO(data), name, 'image/png')


def _uploaded_files(app):
    folder = app.config['UPLOAD_FOLDER']
    if not os.path.isdir(folder):
        return set()
    return set(os.listdir(folder))


class TestListProducts:

    def test_list_ordered_by_name(self, client, products):
        response = client.get('/api/products')

        assert response.status_code == 200
        assert [p['name'] for p in response.get_json()] == [
            'Bijili 100', 'Flower Pot Big', 'Rocket Bomb', 'Sky Shot 30'
        ]

    def test_search_by_name_or_id(self, client, products):
        by_name = client.get('/api/products?search=Rocket').get_json()
        by_id = client.get('/api/products?search=P3').get_json()

        assert [p['product_id'] for p in by_name] == ['P1']
        assert [p['product_id'] for p in by_id] == ['P3']

    def test_low_stock_filter(self, client, products):
        response = client.get('/api/products?stock=low')

        assert sorted(p['product_id'] for p in response.get_json()) == ['P2', 'P4']

    def test_category_filter(self, client, products):
        assert len(client.get('/api/products?category=Rockets').get_json()) == 4
        assert client.get('/api/products?category=Sparklers').get_json() == []

    def test_categories_seeded(self, client):
        names = [c['name'] for c in client.get('/api/categories').get_json()]

        assert 'Rockets' in names
        assert len(names) == 19


class TestCreateProduct:

    def test_create_with_image(self, app, client, session):
        response = client.post('/api/products', data={
            'product_id': 'FP1',
            'name': 'Flower Pot Deluxe',
            'price': '120.50',
            'category': 'flowerpots',
            'stock': '40',
            'image': _image()
        }, content_type='multipart/form-data')

        assert response.status_code == 200
        assert response.get_json() == {'message': 'Product added successfully'}

        product = session.query(Product).filter_by(product_id='FP1').one()
        assert product.stock == 40
        assert str(product.price) == '120.50'
        assert product.image_path.startswith('/uploads/product-')

        served = client.get(product.image_path)
        assert served.status_code == 200
        assert served.data == b'\x89PNG rocket'

    def test_generated_product_id(self, client, session):
        response = client.post('/api/products', data={
            'name': 'Bijili 50', 'price': '8', 'category': 'bijili crackers'
        })

        assert response.status_code == 200
        product = session.query(Product).filter_by(name='Bijili 50').one()
        assert product.product_id.startswith('P')
        assert product.stock == 0

    def test_missing_fields(self, client):
        response = client.post('/api/products', data={'name': 'No price'})

        assert response.status_code == 400
        assert response.get_json()['message'] == 'Name, price, and category are required'

    def test_free_item_allowed(self, client, session):
        response = client.post('/api/products', data={
            'product_id': 'FREE1', 'name': 'Sparkler Sample', 'price': '0.00', 'category': 'Sparklers'
        })

        assert response.status_code == 200
        product = session.query(Product).filter_by(product_id='FREE1').one()
        assert str(product.price) == '0.00'

    def test_unknown_category_removes_upload(self, app, client):
        before = _uploaded_files(app)

        response = client.post('/api/products', data={
            'name': 'Mystery Box', 'price': '99', 'category': 'Nope', 'image': _image()
        }, content_type='multipart/form-data')

        assert response.status_code == 400
        assert response.get_json()['message'] == "Category 'Nope' not found"
        assert _uploaded_files(app) == before

    def test_duplicate_product_id(self, client, products):
        response = client.post('/api/products', data={
            'product_id': 'P1', 'name': 'Copy', 'price': '10', 'category': 'Rockets'
        })

        assert response.status_code == 409

    def test_rejects_non_image(self, client):
        response = client.post('/api/products', data={
            'name': 'Doc', 'price': '10', 'category': 'Rockets',
            'image': (io.BytesIO(b'hello'), 'notes.txt', 'text/plain')
        }, content_type='multipart/form-data')

        assert response.status_code == 400
        assert response.get_json()['message'] == 'Only image files are allowed!'


class TestUpdateAndDeleteProduct:

    def test_update_fields(self, client, session, products):
        response = client.put('/api/products/P1', data={
            'name': 'Rocket Bomb XL', 'price': '12.00', 'category': 'Bombs', 'stock': '25'
        })

        assert response.status_code == 200
        product = session.query(Product).filter_by(product_id='P1').one()
        assert product.name == 'Rocket Bomb XL'
        assert product.stock == 25
        assert product.category.name == 'Bombs'

    def test_update_replaces_image(self, app, client, session, products):
        client.put('/api/products/P2', data={'category': 'Rockets', 'image': _image()},
                   content_type='multipart/form-data')
        first = session.query(Product.image_path).filter_by(product_id='P2').scalar()
        session.remove()

        client.put('/api/products/P2', data={'category': 'Rockets', 'image': _image('new.png')},
                   content_type='multipart/form-data')
        second = session.query(Product.image_path).filter_by(product_id='P2').scalar()

        assert second != first
        assert os.path.basename(first) not in _uploaded_files(app)
        assert os.path.basename(second) in _uploaded_files(app)

    def test_update_invalid_category(self, client, products):
        response = client.put('/api/products/P1', data={'name': 'X', 'category': 'Nope'})

        assert response.status_code == 400
        assert response.get_json()['message'] == 'Invalid category'

    def test_update_unknown_product(self, client, products):
        response = client.put('/api/products/NOPE', data={'category': 'Rockets'})

        assert response.status_code == 404

    def test_delete(self, client, session, products):
        response = client.delete('/api/products/P3')

        assert response.status_code == 200
        assert session.query(Product).filter_by(product_id='P3').first() is None
        assert client.delete('/api/products/P3').status_code == 404
